# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Form schema operations namespace."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional

from ..models.qualifier import QualifierBuilder
from ..models.schema import SchemaMetadata
from ..models.translator import FieldTranslator

if TYPE_CHECKING:
    from ..client import RemedyClient

logger = logging.getLogger(__name__)


class SchemaOperations:
    """
    Form schema lookups, translation helpers and cache maintenance.

    Accessed via ``client.schema``. Metadata is loaded once per form for the
    life of the client (from the schema cache when possible) and shared by
    every entry of that form.

    Example::

        meta = client.schema.get("HPD:Help Desk")
        tr = client.schema.translator("HPD:Help Desk")
        print(client.schema.describe("HPD:Help Desk"))
        client.schema.clear("HPD:Help Desk")
    """

    def __init__(self, client: "RemedyClient") -> None:
        """
        Initialize SchemaOperations.

        :param client: Parent RemedyClient instance.
        :type client: RemedyClient
        """
        self._client = client
        self._translators: Dict[str, FieldTranslator] = {}

    def get(self, form: str) -> SchemaMetadata:
        """
        Schema metadata of ``form``.

        :param form: Form name, e.g. ``"HPD:Help Desk"``.
        :type form: str
        :return: Metadata, from this client's memo, the schema cache or the server.
        :rtype: ~remedy.models.schema.SchemaMetadata
        :raises SchemaError: If the form is unknown to the server.
        """
        return self.translator(form).schema

    def translator(self, form: str) -> FieldTranslator:
        """Field translator of ``form``, memoized per client."""
        tr = self._translators.get(form)
        if tr is None:
            meta = self._client._get_loader().load(form)
            tr = FieldTranslator(meta)
            self._translators[form] = tr
        return tr

    def qualifier(self, form: str) -> QualifierBuilder:
        """Qualifier builder of ``form``."""
        return QualifierBuilder(self.translator(form))

    def build_qualifier(self, form: str, constraints: Mapping[str, Any], extra=None) -> str:
        """Shortcut for ``client.schema.qualifier(form).build(constraints, extra)``."""
        return self.qualifier(form).build(constraints, extra)

    def describe(self, form: str, values: Optional[Mapping[str, Any]] = None) -> str:
        """Human-readable dump of the form's fields, with the session summary on top."""
        session = self._client._get_session()
        return session.as_string("  ") + self.get(form).describe(values)

    def clear(self, form: Optional[str] = None) -> None:
        """
        Forget cached schema metadata.

        :param form: Form to forget; None forgets every form and empties the cache namespace.
        :type form: str or None
        """
        if form is None:
            self._translators.clear()
            if self._client._cache is not None:
                self._client._cache.clear()
            return
        self._translators.pop(form, None)
        self._client._get_loader().forget(form)
        logger.debug("forgot schema of %s", form)
