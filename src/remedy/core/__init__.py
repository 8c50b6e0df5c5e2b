# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Core infrastructure components for the Remedy client.

This module contains the foundational components including authentication,
configuration, HTTP client, logging setup and error handling.
"""

from .errors import (
    RemedyError,
    ConfigError,
    SessionError,
    BackendError,
    SchemaError,
    ValidationError,
    MultiplicityError,
)

__all__ = [
    "RemedyError",
    "ConfigError",
    "SessionError",
    "BackendError",
    "SchemaError",
    "ValidationError",
    "MultiplicityError",
]
