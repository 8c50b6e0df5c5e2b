# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Data models for the Remedy client.

- :class:`~remedy.models.schema.SchemaMetadata`: field schema of one form.
- :class:`~remedy.models.translator.FieldTranslator`: field name and value translation.
- :class:`~remedy.models.qualifier.QualifierBuilder`: qualifier construction.
- :class:`~remedy.models.entry.Entry`: one row of a form.

Note:
    This ``__init__.py`` does NOT import/export models. Import directly from
    the specific module files.
"""

__all__ = []
