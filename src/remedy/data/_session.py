# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Session interface shared by the backend transports.

A session is the only object that talks to the server. It exposes the
logical AR System entry points (login, logoff, field table, field
properties, list-entries-with-fields, create, set, delete) with one common
data representation:

- field tables are ``{field name: field id}``;
- field properties are ``{field id: {"dataType", "defaultVal", "option", "limit"}}``;
- rows are ``(request id, {field id: stored value})`` where enum values are
  integer codes and time values are epoch seconds.

Sessions are not safe for concurrent use. Every call blocks until the server
answers; failures raise and are never retried here.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from ..core._error_codes import (
    SESSION_MISSING_HOST,
    SESSION_MISSING_USER,
    SESSION_NOT_CONNECTED,
    SESSION_UNKNOWN_TYPE,
)
from ..core.config import RemedyConfig
from ..core.errors import SessionError

logger = logging.getLogger(__name__)

FieldTable = Dict[str, int]
FieldProperties = Dict[int, Dict[str, Any]]
Row = Tuple[str, Dict[int, Any]]
SortSpec = Sequence[Union[int, Tuple[int, str]]]


def normalize_sort(sort: Optional[SortSpec]) -> List[Tuple[int, str]]:
    """
    Normalize a sort order to ``[(field id, "asc" | "desc")]``.

    Bare ids sort ascending; negative ids sort descending.
    """
    out: List[Tuple[int, str]] = []
    for item in sort or ():
        if isinstance(item, tuple):
            fid, direction = item
            direction = str(direction).lower()
            out.append((int(fid), "desc" if direction.startswith("d") else "asc"))
        else:
            fid = int(item)
            out.append((abs(fid), "desc" if fid < 0 else "asc"))
    return out


class _Session:
    """
    Base class of the backend transports.

    :param server: Identity of the server, used in cache keys and messages.
    :type server: str
    :param username: Login user, if the transport needs one.
    :type username: str or None
    """

    type = "base"

    def __init__(self, server: str, username: Optional[str] = None) -> None:
        self.server = server
        self.username = username
        self._connected = False

    # ------------------------------------------------------------- lifecycle

    @property
    def connected(self) -> bool:
        return self._connected

    def connect(self) -> "_Session":
        """Open the connection (login). Returns the session."""
        raise NotImplementedError

    def disconnect(self) -> None:
        """Close the connection (logoff). Safe to call more than once."""
        raise NotImplementedError

    def _require_connection(self) -> None:
        if not self._connected:
            raise SessionError(
                f"not connected to {self.server}",
                subcode=SESSION_NOT_CONNECTED,
                details={"server": self.server},
            )

    def __enter__(self) -> "_Session":
        if not self._connected:
            self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.disconnect()

    # ------------------------------------------------------------- schema

    def get_field_table(self, form: str) -> FieldTable:
        """
        Field name -> field id for ``form``.

        :raises SchemaError: If the form has no fields (unknown form).
        """
        raise NotImplementedError

    def get_fields_for_schema(self, form: str) -> FieldProperties:
        """Field id -> properties (``dataType``, ``defaultVal``, ``option``, ``limit``)."""
        raise NotImplementedError

    # ------------------------------------------------------------- entries

    def read(
        self,
        form: str,
        qualifier: str,
        field_ids: Optional[Sequence[int]] = None,
        max: int = 0,
        first: int = 0,
        sort: Optional[SortSpec] = None,
    ) -> List[Row]:
        """
        Rows of ``form`` matching ``qualifier``.

        :param form: Form name.
        :param qualifier: Qualifier string; empty matches everything.
        :param field_ids: Fields to fetch; None fetches every field.
        :param max: Maximum number of rows, 0 for the server limit.
        :param first: Number of rows to skip.
        :param sort: Sort order, see :func:`normalize_sort`.
        :return: ``[(request id, {field id: stored value})]``.
        """
        raise NotImplementedError

    def create_entry(self, form: str, values: Dict[int, Any]) -> str:
        """Create a row and return its request id (may be empty for some forms)."""
        raise NotImplementedError

    def set_entry(self, form: str, request_id: str, values: Dict[int, Any]) -> None:
        raise NotImplementedError

    def delete_entry(self, form: str, request_id: str) -> None:
        raise NotImplementedError

    # ------------------------------------------------------------- text

    def as_string(self, prefix: str = "") -> str:
        """Connection summary for debugging; the password is never shown."""
        lines = [
            ("Type", self.type),
            ("Server", self.server),
            ("Username", self.username or ""),
            ("Password", "(not shown)"),
            ("Connected", "yes" if self._connected else "no"),
        ]
        return "\n".join(f"{prefix}{label + ':':<12} {value}" for label, value in lines) + "\n"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(server={self.server!r}, username={self.username!r})"


def make_session(config: RemedyConfig, http_session=None) -> _Session:
    """
    Build the session selected by ``config.session_type``.

    :param config: Client configuration.
    :type config: ~remedy.core.config.RemedyConfig
    :param http_session: Optional :class:`requests.Session` for the REST transport.
    :return: An unconnected session.
    :raises SessionError: If required settings are missing or the type is unknown.
    """
    kind = (config.session_type or "ars").lower()
    if kind == "ars":
        from ._ars import ARSSession

        if not (config.remedy_host or config.remedy_url):
            raise SessionError("no remedy_host set", subcode=SESSION_MISSING_HOST)
        if not config.remedy_user:
            raise SessionError("no remedy_user set", subcode=SESSION_MISSING_USER)
        return ARSSession.from_config(config, http_session=http_session)
    if kind == "remctl":
        from ._remctl import RemctlSession

        if not (config.remctl_host or config.remedy_host):
            raise SessionError("no remctl_host set", subcode=SESSION_MISSING_HOST)
        return RemctlSession.from_config(config)
    raise SessionError(
        f"unknown session type '{config.session_type}'",
        subcode=SESSION_UNKNOWN_TYPE,
        details={"session_type": config.session_type},
    )
