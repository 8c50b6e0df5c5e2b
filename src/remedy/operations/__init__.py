# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Operation namespace classes for the Remedy client.

This module contains the operation namespace classes that organize
related operations under intuitive namespaces:
- RecordOperations: entry CRUD
- QueryOperations: constraint-based queries
- SchemaOperations: form schema lookups and cache maintenance
"""

__all__ = []
