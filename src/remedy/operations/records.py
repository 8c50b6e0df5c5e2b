# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Entry CRUD operations namespace."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Sequence, Union

from ..core._error_codes import MULTIPLICITY_MANY, MULTIPLICITY_NONE, VALIDATION_NO_REQUEST_ID
from ..core.errors import MultiplicityError, ValidationError
from ..data._session import SortSpec
from ..models.entry import REQUEST_ID_FIELD, Entry
from ..models.qualifier import QualifierClause, quote

if TYPE_CHECKING:
    from ..client import RemedyClient

logger = logging.getLogger(__name__)


class RecordOperations:
    """
    Entry create, read, update and delete.

    Accessed via ``client.records``. Entries hold stored values keyed by field
    id; name-based access and validation go through the form's translator.

    Example::

        entry = client.records.new("HPD:WorkLog", **{"Incident Number": "INC000000012345"})
        entry["Description"] = "Rebooted"
        entry = client.records.save(entry)

        for e in client.records.read_where("HPD:Help Desk", "'7' < 4", max=10):
            print(e.request_id, e["Description"])
    """

    def __init__(self, client: "RemedyClient") -> None:
        """
        Initialize RecordOperations.

        :param client: Parent RemedyClient instance.
        :type client: RemedyClient
        """
        self._client = client

    # ------------------------------------------------------------------ new

    def new(self, form: str, **values: Any) -> Entry:
        """
        Blank entry for ``form`` with optional initial human values.

        :raises SchemaError: If a field does not exist.
        :raises ValidationError: If a value cannot be converted.
        """
        entry = Entry(form, self._client.schema.translator(form))
        entry.update_values(values)
        return entry

    # ------------------------------------------------------------------ read

    def _field_ids(self, form: str, fields: Optional[Sequence[str]]) -> List[int]:
        tr = self._client.schema.translator(form)
        if fields:
            return tr.names_to_ids(fields)
        return sorted(tr.schema.field_name_to_id.values())

    def read_where(
        self,
        form: str,
        qualifier: str,
        fields: Optional[Sequence[str]] = None,
        max: int = 0,
        first: int = 0,
        sort: Optional[SortSpec] = None,
    ) -> List[Entry]:
        """
        Entries of ``form`` matching a qualifier string.

        :param form: Form name.
        :type form: str
        :param qualifier: Qualifier, e.g. ``"'7' < 4"``.
        :type qualifier: str
        :param fields: Field names to fetch; every known field when None.
        :type fields: list[str] or None
        :param max: Maximum number of entries, 0 for the server limit.
        :type max: int
        :param first: Number of entries to skip.
        :type first: int
        :param sort: Sort order by field id; negative ids sort descending.
        :return: Matching entries.
        :rtype: list[~remedy.models.entry.Entry]
        """
        tr = self._client.schema.translator(form)
        session = self._client._get_session()
        rows = session.read(form, qualifier, self._field_ids(form, fields), max=max, first=first, sort=sort)
        return [Entry.from_row(tr, values, request_id=rid) for rid, values in rows]

    def read_one(self, form: str, qualifier: str, missing_ok: bool = False) -> Optional[Entry]:
        """
        Exactly one entry matching ``qualifier``.

        :param missing_ok: Return None instead of raising when nothing matches.
        :type missing_ok: bool
        :raises MultiplicityError: If several entries match, or none and not ``missing_ok``.
        """
        entries = self.read_where(form, qualifier)
        if len(entries) > 1:
            raise MultiplicityError(
                f"too many matches for '{qualifier}' in {form}",
                subcode=MULTIPLICITY_MANY,
                count=len(entries),
                details={"form": form, "qualifier": qualifier},
            )
        if not entries:
            if missing_ok:
                return None
            raise MultiplicityError(
                f"no match for '{qualifier}' in {form}",
                subcode=MULTIPLICITY_NONE,
                count=0,
                details={"form": form, "qualifier": qualifier},
            )
        return entries[0]

    def get(self, form: str, request_id: str) -> Entry:
        """
        Entry of ``form`` by request id.

        :raises MultiplicityError: If no entry has that id.
        """
        return self.read_one(form, QualifierClause(f"'{REQUEST_ID_FIELD}' = {quote(request_id)}"))

    # ------------------------------------------------------------------ write

    def create(self, form: str, data: Union[Entry, Mapping[str, Any]]) -> str:
        """
        Create an entry.

        :param form: Form name.
        :type form: str
        :param data: An :class:`~remedy.models.entry.Entry` or a mapping of field
            names to human values.
        :return: Request id of the new entry. When ``data`` is an Entry its
            :attr:`~remedy.models.entry.Entry.request_id` is set as well.
        :rtype: str
        :raises MultiplicityError: If the server returns no id and the new entry
            cannot be found again by its values.
        """
        entry = data if isinstance(data, Entry) else self.new(form, **dict(data))
        values = entry.updatable_values()
        session = self._client._get_session()
        logger.debug("create_entry (%s, %d fields)", form, len(values))
        request_id = session.create_entry(form, values)
        if not request_id:
            logger.warning("%s: created, but no request id returned; searching for it", form)
            request_id = self._locate(form, entry)
        entry.request_id = request_id
        return request_id

    def _locate(self, form: str, entry: Entry) -> str:
        constraints = {k: v for k, v in entry.to_human_dict().items() if v is not None}
        constraints.pop(entry.translator.id_to_name(REQUEST_ID_FIELD), None)
        qualifier = self._client.schema.qualifier(form).build(constraints)
        found = self.read_one(form, qualifier)
        return found.request_id

    def update(self, entry: Entry) -> None:
        """
        Write the entry's updatable values to the server.

        :raises ValidationError: If the entry has no request id.
        """
        rid = entry.request_id
        if not rid:
            raise ValidationError(
                f"cannot update {entry.table_name} entry without a request id",
                subcode=VALIDATION_NO_REQUEST_ID,
                details={"form": entry.table_name},
            )
        values = entry.updatable_values()
        values.pop(REQUEST_ID_FIELD, None)
        logger.debug("set_entry (%s, %s, %d fields)", entry.table_name, rid, len(values))
        self._client._get_session().set_entry(entry.table_name, rid, values)

    def save(self, entry: Entry) -> Entry:
        """
        Update the entry if it has a request id, create it otherwise.

        :return: The entry as re-read from the server.
        :rtype: ~remedy.models.entry.Entry
        """
        if entry.request_id:
            self.update(entry)
            rid = entry.request_id
        else:
            rid = self.create(entry.table_name, entry)
        return self.get(entry.table_name, rid)

    def delete(self, form: str, request_id: str) -> None:
        """Delete the entry of ``form`` with ``request_id``."""
        logger.debug("delete_entry (%s, %s)", form, request_id)
        self._client._get_session().delete_entry(form, request_id)

    # ------------------------------------------------------------------ bulk

    def to_dicts(self, entries: Sequence[Entry]) -> List[Dict[str, Any]]:
        """Human-valued dicts for a list of entries."""
        return [e.to_human_dict() for e in entries]
