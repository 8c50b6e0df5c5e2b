# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Direct session over the AR System REST API.

The REST API keys entry values by field name and renders enum values as
labels and times as ISO-8601 strings. This session converts both ways so that
callers see the same id-keyed stored representation (enum codes, epoch
seconds) as with any other transport. For that it keeps the field table and
field properties of every form it has touched.
"""

from __future__ import annotations

import datetime as _dt
import logging
import re
from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import quote as _urlquote

import requests
from dateutil import parser as date_parser

from ..core._auth import ARJwtCredential, _AuthManager
from ..core._error_codes import (
    BACKEND_BAD_RESPONSE,
    BACKEND_REQUEST_FAILED,
    SCHEMA_EMPTY_FIELD_TABLE,
    http_subcode,
)
from ..core._http import _HttpClient, ar_error_message
from ..core.config import RemedyConfig
from ..core.errors import BackendError, SchemaError
from ..models.schema import normalize_datatype
from ._session import FieldProperties, FieldTable, Row, SortSpec, _Session, normalize_sort

logger = logging.getLogger(__name__)

API_PATH = "/api/arsys/v1"

_ID_FROM_LOCATION = re.compile(r"/entry/[^/]+/([^/?#]+)")

# REST property names -> the names used by the rest of the client
_PROPERTY_KEYS = {
    "dataType": ("dataType", "datatype", "data_type"),
    "defaultVal": ("defaultVal", "default_value", "defaultValue"),
    "option": ("option", "field_option", "fieldOption"),
    "limit": ("limit", "limits"),
}


def _first(item: Dict[str, Any], keys: Sequence[str]) -> Any:
    for k in keys:
        if k in item:
            return item[k]
    return None


def _enum_limit(limit: Any) -> Any:
    """Rewrite a REST selection limit into the ``enumLimits`` layout; other limits pass through."""
    if not isinstance(limit, dict) or "enumLimits" in limit:
        return limit
    custom = limit.get("custom_list") or limit.get("customList")
    if custom is not None:
        return {
            "enumLimits": {
                "customList": [
                    {
                        "itemNumber": _first(item, ("itemNumber", "item_number", "id")),
                        "itemName": _first(item, ("itemName", "item_name", "name")),
                    }
                    for item in custom
                ]
            }
        }
    regular = _first(limit, ("regular_list", "regularList", "selection_values"))
    if regular is not None:
        return {"enumLimits": {"regularList": list(regular)}}
    return limit


def _to_epoch(value: Any) -> Any:
    if value is None or isinstance(value, (int, float)):
        return value
    text = str(value)
    if text.isdigit():
        return int(text)
    try:
        return int(date_parser.isoparse(text).timestamp())
    except ValueError:
        return int(date_parser.parse(text).timestamp())


def _to_iso(value: Any) -> Any:
    if value is None or isinstance(value, str):
        return value
    return _dt.datetime.fromtimestamp(int(value), tz=_dt.timezone.utc).isoformat()


class ARSSession(_Session):
    """
    Session talking directly to the AR System REST API.

    :param base_url: Base URL of the server, e.g. ``https://remedy.example.edu``.
    :type base_url: str
    :param username: Login user.
    :type username: str
    :param password: Password for ``username``.
    :type password: str or None
    :param config: Optional configuration for timeouts and retries.
    :type config: ~remedy.core.config.RemedyConfig or None
    :param http_session: Optional :class:`requests.Session` for connection pooling.
    :param credential: Optional credential overriding the user name and password login.
    :type credential: ~azure.core.credentials.TokenCredential or None
    """

    type = "ars"

    def __init__(
        self,
        base_url: str,
        username: str,
        password: Optional[str] = None,
        config: Optional[RemedyConfig] = None,
        http_session: Optional[requests.Session] = None,
        credential=None,
    ) -> None:
        self.base_url = (base_url or "").rstrip("/")
        if not self.base_url:
            raise ValueError("base_url is required.")
        super().__init__(self.base_url, username)
        self.api = f"{self.base_url}{API_PATH}"
        self.config = config or RemedyConfig()
        self._http = _HttpClient.from_config(self.config, session=http_session)
        self._credential = credential or ARJwtCredential(self.base_url, username, password, http=self._http)
        self.auth = _AuthManager(self._credential)
        # Cache: form -> {name: id}
        self._field_tables: Dict[str, FieldTable] = {}
        # Cache: form -> {id: properties}
        self._field_properties: Dict[str, FieldProperties] = {}

    @classmethod
    def from_config(cls, config: RemedyConfig, http_session=None) -> "ARSSession":
        return cls(
            config.server_url,
            config.remedy_user,
            config.remedy_pass,
            config=config,
            http_session=http_session,
        )

    # ------------------------------------------------------------- plumbing

    def _headers(self) -> Dict[str, str]:
        token = self.auth._acquire_token(self.base_url).access_token
        return {
            "Authorization": f"AR-JWT {token}",
            "Accept": "application/json",
            "Content-Type": "application/json",
        }

    def _url(self, *parts: str) -> str:
        return "/".join([self.api] + [_urlquote(p, safe="") for p in parts])

    def _request(self, method: str, url: str, operation: str, **kwargs: Any) -> requests.Response:
        """
        Send one request and raise :class:`BackendError` on failure.

        :raises BackendError: On network errors and non-2xx responses.
        """
        headers = self._headers()
        headers.update(kwargs.pop("headers", {}) or {})
        try:
            r = self._http._request(method, url, headers=headers, **kwargs)
        except requests.exceptions.RequestException as exc:
            raise BackendError(
                f"{operation} failed: {exc}",
                subcode=BACKEND_REQUEST_FAILED,
                operation=operation,
            ) from exc
        if r.status_code >= 400:
            body = r.text or ""
            message = ar_error_message(r)
            raise BackendError(
                f"{operation} failed ({r.status_code}): {message or body[:200] or 'no details'}",
                subcode=http_subcode(r.status_code),
                status_code=r.status_code,
                operation=operation,
                body_excerpt=body[:200] or None,
            )
        return r

    # ------------------------------------------------------------- lifecycle

    def connect(self) -> "ARSSession":
        """Log in; raises :class:`~remedy.core.errors.SessionError` on failure."""
        logger.debug("login to %s as %s", self.base_url, self.username)
        self._credential.get_token(self.base_url)
        self._connected = True
        return self

    def disconnect(self) -> None:
        if not self._connected:
            return
        logger.debug("logoff from %s", self.base_url)
        revoke = getattr(self._credential, "revoke", None)
        if revoke is not None:
            revoke()
        self._connected = False
        self._http.close()

    # ------------------------------------------------------------- schema

    def _load_fields(self, form: str) -> None:
        if form in self._field_tables:
            return
        self._require_connection()
        r = self._request("get", self._url("fields", form), "GetFieldsForSchema")
        try:
            body = r.json()
        except ValueError as exc:
            raise BackendError(
                f"GetFieldsForSchema ({form}): response is not JSON",
                subcode=BACKEND_BAD_RESPONSE,
                operation="GetFieldsForSchema",
            ) from exc
        items = body.get("entries", body.get("fields", [])) if isinstance(body, dict) else body
        table: FieldTable = {}
        props: FieldProperties = {}
        for item in items or []:
            fid = _first(item, ("id", "fieldId", "field_id"))
            name = item.get("name")
            if fid is None or not name:
                continue
            fid = int(fid)
            table[name] = fid
            entry = {key: _first(item, aliases) for key, aliases in _PROPERTY_KEYS.items()}
            entry["dataType"] = normalize_datatype(entry["dataType"])
            entry["limit"] = _enum_limit(entry["limit"])
            props[fid] = entry
        if not table:
            raise SchemaError(
                f"GetFieldTable ({form}): no fields found",
                subcode=SCHEMA_EMPTY_FIELD_TABLE,
                details={"form": form, "server": self.server},
            )
        logger.debug("%d fields in %s", len(table), form)
        self._field_tables[form] = table
        self._field_properties[form] = props

    def get_field_table(self, form: str) -> FieldTable:
        self._load_fields(form)
        return dict(self._field_tables[form])

    def get_fields_for_schema(self, form: str) -> FieldProperties:
        self._load_fields(form)
        return {fid: dict(p) for fid, p in self._field_properties[form].items()}

    def _enum_labels(self, form: str, fid: int) -> Dict[int, str]:
        limit = (self._field_properties[form].get(fid) or {}).get("limit") or {}
        enum_limits = limit.get("enumLimits") or {}
        if "customList" in enum_limits:
            return {int(i["itemNumber"]): i["itemName"] for i in enum_limits["customList"]}
        return dict(enumerate(enum_limits.get("regularList") or []))

    def _stored_from_wire(self, form: str, fid: int, value: Any) -> Any:
        datatype = (self._field_properties[form].get(fid) or {}).get("dataType")
        if value is None:
            return None
        if datatype == "enum" and isinstance(value, str):
            for code, label in self._enum_labels(form, fid).items():
                if label == value:
                    return code
            return None
        if datatype == "time":
            try:
                return _to_epoch(value)
            except (ValueError, OverflowError) as exc:
                raise BackendError(
                    f"GetListEntryWithFields ({form}): bad timestamp {value!r} in field {fid}",
                    subcode=BACKEND_BAD_RESPONSE,
                    operation="GetListEntryWithFields",
                    details={"form": form, "field_id": fid},
                ) from exc
        return value

    def _wire_from_stored(self, form: str, fid: int, value: Any) -> Any:
        datatype = (self._field_properties[form].get(fid) or {}).get("dataType")
        if value is None:
            return None
        if datatype == "enum" and isinstance(value, int):
            return self._enum_labels(form, fid).get(value, value)
        if datatype == "time":
            return _to_iso(value)
        return value

    def _wire_values(self, form: str, values: Dict[int, Any]) -> Dict[str, Any]:
        self._load_fields(form)
        id_to_name = {fid: name for name, fid in self._field_tables[form].items()}
        out: Dict[str, Any] = {}
        for fid, value in values.items():
            name = id_to_name.get(int(fid))
            if name is None:
                raise SchemaError(f"no field id {fid} in {form}", details={"form": form, "field_id": fid})
            out[name] = self._wire_from_stored(form, int(fid), value)
        return out

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
        self._load_fields(form)
        table = self._field_tables[form]
        id_to_name = {fid: name for name, fid in table.items()}
        params: Dict[str, Any] = {}
        if qualifier:
            params["q"] = qualifier
        if field_ids:
            names = [id_to_name[int(f)] for f in field_ids if int(f) in id_to_name]
            params["fields"] = "values(" + ",".join(names) + ")"
        if max:
            params["limit"] = int(max)
        if first:
            params["offset"] = int(first)
        order = normalize_sort(sort)
        if order:
            params["sort"] = ",".join(f"{id_to_name.get(fid, fid)}.{d}" for fid, d in order)
        logger.debug("GetListEntryWithFields (%s, %s)", form, qualifier)
        r = self._request("get", self._url("entry", form), "GetListEntryWithFields", params=params)
        body = r.json() if r.text else {}
        rows: List[Row] = []
        for item in body.get("entries", []):
            wire = item.get("values") or {}
            stored: Dict[int, Any] = {}
            for name, value in wire.items():
                fid = table.get(name)
                if fid is not None:
                    stored[fid] = self._stored_from_wire(form, fid, value)
            rid = stored.get(1) or self._id_from_links(item)
            rows.append((rid, stored))
        logger.debug("%d entr%s returned", len(rows), "y" if len(rows) == 1 else "ies")
        return rows

    @staticmethod
    def _id_from_links(item: Dict[str, Any]) -> Optional[str]:
        for link in (item.get("_links") or {}).get("self") or []:
            m = _ID_FROM_LOCATION.search(link.get("href", ""))
            if m:
                return m.group(1)
        return None

    def create_entry(self, form: str, values: Dict[int, Any]) -> str:
        self._require_connection()
        payload = {"values": self._wire_values(form, values)}
        logger.debug("CreateEntry (%s, %d fields)", form, len(values))
        r = self._request("post", self._url("entry", form), "CreateEntry", json=payload)
        location = r.headers.get("Location") or ""
        m = _ID_FROM_LOCATION.search(location)
        return m.group(1) if m else ""

    def set_entry(self, form: str, request_id: str, values: Dict[int, Any]) -> None:
        self._require_connection()
        payload = {"values": self._wire_values(form, values)}
        logger.debug("SetEntry (%s, %s, %d fields)", form, request_id, len(values))
        self._request("put", self._url("entry", form, request_id), "SetEntry", json=payload)

    def delete_entry(self, form: str, request_id: str) -> None:
        self._require_connection()
        logger.debug("DeleteEntry (%s, %s)", form, request_id)
        self._request("delete", self._url("entry", form, request_id), "DeleteEntry")
