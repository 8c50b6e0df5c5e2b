# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Data access layer for the Remedy client.

This module contains the backend sessions (direct REST and remctl relay),
the schema cache and the schema loader.
"""

__all__ = []
