# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Structured exceptions raised by the Remedy client.

Every failure terminates the current operation and surfaces as one of these
classes. Callers branch on the class or on :attr:`RemedyError.code` and
:attr:`RemedyError.subcode` instead of matching message text.
"""

from __future__ import annotations

import datetime as _dt
from typing import Any, Dict, Optional


class RemedyError(Exception):
    """Base structured error for the Remedy client."""

    def __init__(
        self,
        message: str,
        *,
        code: str,
        subcode: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
        source: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.subcode = subcode
        self.status_code = status_code
        self.details = details or {}
        self.source = source or "client"
        self.timestamp = _dt.datetime.now(_dt.timezone.utc).isoformat()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "code": self.code,
            "subcode": self.subcode,
            "status_code": self.status_code,
            "details": self.details,
            "source": self.source,
            "timestamp": self.timestamp,
        }

    def __repr__(self) -> str:  # pragma: no cover
        return f"{self.__class__.__name__}(code={self.code!r}, subcode={self.subcode!r}, message={self.message!r})"


class ConfigError(RemedyError):
    def __init__(self, message: str, *, subcode: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="config_error", subcode=subcode, details=details, source="client")


class SessionError(RemedyError):
    """Connection or authentication failure; the session is unusable."""

    def __init__(
        self,
        message: str,
        *,
        subcode: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message,
            code="session_error",
            subcode=subcode,
            status_code=status_code,
            details=details,
            source="server",
        )


class BackendError(RemedyError):
    """A backend call failed: HTTP error status or relay error output."""

    def __init__(
        self,
        message: str,
        *,
        subcode: Optional[str] = None,
        status_code: Optional[int] = None,
        operation: Optional[str] = None,
        body_excerpt: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        d = details or {}
        if operation is not None:
            d["operation"] = operation
        if body_excerpt is not None:
            d["body_excerpt"] = body_excerpt
        super().__init__(
            message,
            code="backend_error",
            subcode=subcode,
            status_code=status_code,
            details=d,
            source="server",
        )


class SchemaError(RemedyError):
    """Unknown form or field, or schema metadata the client cannot use."""

    def __init__(self, message: str, *, subcode: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="schema_error", subcode=subcode, details=details, source="client")


class ValidationError(RemedyError):
    def __init__(self, message: str, *, subcode: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="validation_error", subcode=subcode, details=details, source="client")


class MultiplicityError(RemedyError):
    """A read expected exactly one row and got zero or several."""

    def __init__(
        self,
        message: str,
        *,
        subcode: Optional[str] = None,
        count: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        d = details or {}
        if count is not None:
            d["count"] = count
        super().__init__(message, code="multiplicity_error", subcode=subcode, details=d, source="client")


__all__ = [
    "RemedyError",
    "ConfigError",
    "SessionError",
    "BackendError",
    "SchemaError",
    "ValidationError",
    "MultiplicityError",
]
