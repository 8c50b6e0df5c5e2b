# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Relay session through a remctl gateway.

Callers without direct network access or credentials for the Remedy server
run every logical operation on a privileged gateway host::

    remctl [-p PORT] [-s PRINCIPAL] HOST remedy-gateway <action> <json arguments>

The gateway answers with JSON on stdout, already in the id-keyed stored
representation. Any output on stderr, or a non-zero exit, is an error.
Authentication is Kerberos; a ticket can be obtained from a keytab with
``k5start`` before the first call.
"""

from __future__ import annotations

import json
import logging
import os
import subprocess
import tempfile
from typing import Any, Dict, List, Optional, Sequence

from ..core._error_codes import (
    BACKEND_BAD_RESPONSE,
    RELAY_ARGS_TOO_LARGE,
    RELAY_EXIT_STATUS,
    RELAY_KERBEROS,
    RELAY_STDERR,
    SCHEMA_EMPTY_FIELD_TABLE,
    SESSION_LOGIN_FAILED,
)
from ..core.config import RemedyConfig
from ..core.errors import BackendError, SchemaError, SessionError
from ._session import FieldProperties, FieldTable, Row, SortSpec, _Session, normalize_sort

logger = logging.getLogger(__name__)

REMCTL = "remctl"
K5START = "/usr/bin/k5start"
DEFAULT_SERVICE = "remedy-gateway"

# Largest serialized argument list the gateway accepts
ARG_SIZE_LIMIT = 128000

# Gateway actions
ACTION_READ = "read_where"
ACTION_CREATE = "CreateEntry"
ACTION_SET = "SetEntry"
ACTION_DELETE = "DeleteEntry"
ACTION_FIELD_TABLE = "ars_GetFieldTable"
ACTION_FIELDS_FOR_SCHEMA = "ars_GetFieldsForSchema"


def make_kerberos_ticket(
    primary: str,
    instance: str,
    realm: str,
    keytab: str,
    ticket_file: Optional[str] = None,
    k5start: str = K5START,
) -> str:
    """
    Obtain a Kerberos ticket from a keytab and point ``KRB5CCNAME`` at it.

    :param primary: Principal primary, e.g. ``service``.
    :param instance: Principal instance, e.g. the host name.
    :param realm: Kerberos realm.
    :param keytab: Path of the keytab.
    :param ticket_file: Credential cache path; a temporary file when None.
    :return: Path of the credential cache.
    :rtype: str
    :raises SessionError: If the keytab is missing or ``k5start`` fails.
    """
    if not os.path.exists(keytab):
        raise SessionError(f"keytab file '{keytab}' not found", subcode=RELAY_KERBEROS, details={"keytab": keytab})
    if ticket_file is None:
        fd, ticket_file = tempfile.mkstemp(prefix="krb5cc_remedy_")
        os.close(fd)
    cmd = [k5start, "-u", primary, "-i", instance, "-r", realm, "-f", keytab, "-k", ticket_file]
    logger.debug("running %s", " ".join(cmd))
    try:
        proc = subprocess.run(cmd, capture_output=True, text=True, check=False)
    except OSError as exc:
        raise SessionError(f"cannot run {k5start}: {exc}", subcode=RELAY_KERBEROS) from exc
    if proc.returncode != 0:
        raise SessionError(
            f"k5start failed ({proc.returncode}): {proc.stderr.strip()}",
            subcode=RELAY_KERBEROS,
            details={"principal": f"{primary}/{instance}@{realm}"},
        )
    os.environ["KRB5CCNAME"] = f"FILE:{ticket_file}"
    return ticket_file


def _split_principal(principal: str):
    """``primary/instance@REALM`` -> (primary, instance, realm)."""
    name, _, realm = principal.partition("@")
    primary, _, instance = name.partition("/")
    return primary, instance, realm


class RemctlSession(_Session):
    """
    Session relaying calls through a remctl gateway.

    :param host: Gateway host name.
    :type host: str
    :param server: Identity of the Remedy server behind the gateway, for cache keys.
    :type server: str or None
    :param port: remctl port; 0 or None for the default.
    :type port: int or None
    :param principal: Gateway service principal, if not the default.
    :type principal: str or None
    :param service: remctl command name on the gateway.
    :type service: str
    :param keytab: Optional keytab for obtaining a ticket on connect.
    :type keytab: str or None
    :param client_principal: Principal to obtain the ticket for.
    :type client_principal: str or None
    :param size_limit: Maximum length of the serialized argument list.
    :type size_limit: int
    """

    type = "remctl"

    def __init__(
        self,
        host: str,
        server: Optional[str] = None,
        port: Optional[int] = None,
        principal: Optional[str] = None,
        service: str = DEFAULT_SERVICE,
        keytab: Optional[str] = None,
        client_principal: Optional[str] = None,
        ticket_file: Optional[str] = None,
        size_limit: int = ARG_SIZE_LIMIT,
    ) -> None:
        super().__init__(server or host, client_principal)
        self.host = host
        self.port = port or 0
        self.principal = principal
        self.service = service
        self.keytab = keytab
        self.client_principal = client_principal
        self.ticket_file = ticket_file
        self.size_limit = size_limit

    @classmethod
    def from_config(cls, config: RemedyConfig) -> "RemctlSession":
        return cls(
            config.remctl_host or config.remedy_host,
            server=config.remedy_host or config.remctl_host,
            port=config.remctl_port,
            principal=config.remctl_principal,
            service=config.remctl_service,
            keytab=config.remctl_keytab,
            client_principal=config.remedy_user,
            ticket_file=config.remctl_ticket_file,
        )

    # ------------------------------------------------------------- plumbing

    def _command(self, action: str, frozen: str) -> List[str]:
        cmd = [REMCTL]
        if self.port:
            cmd += ["-p", str(self.port)]
        if self.principal:
            cmd += ["-s", self.principal]
        cmd += [self.host, self.service, action, frozen]
        return cmd

    def call(self, action: str, *args: Any) -> Any:
        """
        Run one gateway action and return its decoded JSON result.

        :raises BackendError: If the arguments are too large, the command fails,
            writes to stderr or returns something that is not JSON.
        """
        frozen = json.dumps(list(args), separators=(",", ":"), default=str)
        if len(frozen) > self.size_limit:
            raise BackendError(
                f"the argument list's serialized length is {len(frozen)} characters which "
                f"exceeds the limit of {self.size_limit} characters (action was '{action}')",
                subcode=RELAY_ARGS_TOO_LARGE,
                operation=action,
            )
        cmd = self._command(action, frozen)
        logger.debug("remctl %s %s %s", self.host, self.service, action)
        try:
            proc = subprocess.run(cmd, capture_output=True, text=True, check=False)
        except OSError as exc:
            raise BackendError(f"cannot run {REMCTL}: {exc}", subcode=RELAY_EXIT_STATUS, operation=action) from exc
        if proc.stderr and proc.stderr.strip():
            raise BackendError(
                f"remctl {action} error: {proc.stderr.strip()}",
                subcode=RELAY_STDERR,
                operation=action,
                body_excerpt=proc.stderr.strip()[:200],
            )
        if proc.returncode != 0:
            raise BackendError(
                f"remctl {action} exited with status {proc.returncode}",
                subcode=RELAY_EXIT_STATUS,
                operation=action,
            )
        out = (proc.stdout or "").strip()
        if not out:
            return None
        try:
            return json.loads(out)
        except ValueError as exc:
            raise BackendError(
                f"remctl {action}: response is not JSON",
                subcode=BACKEND_BAD_RESPONSE,
                operation=action,
                body_excerpt=out[:200],
            ) from exc

    # ------------------------------------------------------------- lifecycle

    def connect(self) -> "RemctlSession":
        if self.keytab:
            if not self.client_principal:
                raise SessionError("a keytab needs a client principal", subcode=SESSION_LOGIN_FAILED)
            primary, instance, realm = _split_principal(self.client_principal)
            self.ticket_file = make_kerberos_ticket(primary, instance, realm, self.keytab, self.ticket_file)
        self._connected = True
        return self

    def disconnect(self) -> None:
        self._connected = False

    # ------------------------------------------------------------- schema

    def get_field_table(self, form: str) -> FieldTable:
        self._require_connection()
        result = self.call(ACTION_FIELD_TABLE, form) or {}
        if not result:
            raise SchemaError(
                f"GetFieldTable ({form}): no fields found",
                subcode=SCHEMA_EMPTY_FIELD_TABLE,
                details={"form": form, "server": self.server},
            )
        return {name: int(fid) for name, fid in result.items()}

    def get_fields_for_schema(self, form: str) -> FieldProperties:
        self._require_connection()
        result = self.call(ACTION_FIELDS_FOR_SCHEMA, form) or {}
        return {int(fid): props for fid, props in result.items()}

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
        self._require_connection()
        result = self.call(
            ACTION_READ,
            form,
            qualifier or "",
            list(field_ids or []),
            int(max or 0),
            int(first or 0),
            [list(s) for s in normalize_sort(sort)],
        )
        rows: List[Row] = []
        for rid, values in result or []:
            rows.append((rid, {int(k): v for k, v in (values or {}).items()}))
        return rows

    def create_entry(self, form: str, values: Dict[int, Any]) -> str:
        self._require_connection()
        result = self.call(ACTION_CREATE, form, {str(k): v for k, v in values.items()})
        return str(result) if result else ""

    def set_entry(self, form: str, request_id: str, values: Dict[int, Any]) -> None:
        self._require_connection()
        self.call(ACTION_SET, form, request_id, {str(k): v for k, v in values.items()})

    def delete_entry(self, form: str, request_id: str) -> None:
        self._require_connection()
        self.call(ACTION_DELETE, form, request_id)
