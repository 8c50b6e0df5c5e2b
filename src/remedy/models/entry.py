# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Entry data model for one row of a Remedy form.

Values are held by field id in their stored representation. Access by field
name goes through the form's :class:`~remedy.models.translator.FieldTranslator`,
so every write is validated against the schema.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Mapping, Optional

from ..core._error_codes import VALIDATION_NOT_UPDATABLE
from ..core.errors import ValidationError
from .schema import FieldId, FieldName
from .translator import FieldTranslator

# Core field ids shared by every form
REQUEST_ID_FIELD = 1
SUBMITTER_FIELD = 2
CREATE_DATE_FIELD = 3
ASSIGNED_TO_FIELD = 4
LAST_MODIFIED_BY_FIELD = 5
MODIFIED_DATE_FIELD = 6
STATUS_FIELD = 7
SHORT_DESCRIPTION_FIELD = 8


@dataclass
class Entry:
    """
    One row of a Remedy form.

    :param table_name: Form name, e.g. ``"HPD:Help Desk"``.
    :type table_name: str
    :param translator: Translator of the form; shared, not owned.
    :type translator: ~remedy.models.translator.FieldTranslator
    :param values: Field id -> stored value.
    :type values: dict[int, Any]

    Example:
        Name-based access with translation::

            entry = client.records.get("HPD:Help Desk", "000000000012345")
            entry["Status"]                 # "Assigned"
            entry.get_stored("Status")      # 1
            entry.set(Status="Resolved")    # stored as 4
    """

    table_name: str
    translator: FieldTranslator = field(repr=False, compare=False)
    values: Dict[FieldId, Any] = field(default_factory=dict)

    @classmethod
    def from_row(
        cls,
        translator: FieldTranslator,
        values: Mapping[Any, Any],
        request_id: Optional[str] = None,
    ) -> "Entry":
        """
        Build an entry from a backend row keyed by field id.

        Ids the schema does not know (excluded fields, for instance) are dropped.
        """
        known = translator.schema.field_id_to_name
        stored = {int(k): v for k, v in values.items() if int(k) in known}
        entry = cls(translator.form_name, translator, stored)
        if request_id is not None and entry.values.get(REQUEST_ID_FIELD) is None:
            entry.values[REQUEST_ID_FIELD] = request_id
        return entry

    # ------------------------------------------------------------- ids

    @property
    def request_id(self) -> Optional[str]:
        """Value of the Request ID field (id 1); None for rows not yet created."""
        rid = self.values.get(REQUEST_ID_FIELD)
        return rid or None

    @request_id.setter
    def request_id(self, value: Optional[str]) -> None:
        self.values[REQUEST_ID_FIELD] = value

    # ------------------------------------------------------------- access

    def get(self, name: FieldName, default: Any = None) -> Any:
        """Human value of ``name``; ``default`` when it has no value."""
        fid = self.translator.name_to_id(name)
        value = self.translator.stored_to_human(name, self.values.get(fid))
        return default if value is None else value

    def get_stored(self, name: FieldName) -> Any:
        return self.values.get(self.translator.name_to_id(name))

    def set(self, **fields: Any) -> "Entry":
        """Set several fields from human values. Returns the entry for chaining."""
        for name, value in fields.items():
            self.set_field(name, value)
        return self

    def set_field(self, name: FieldName, value: Any) -> None:
        """
        Set one field from a human value.

        :raises SchemaError: If the form has no such field.
        :raises ValidationError: If the value cannot be converted.
        """
        fid = self.translator.name_to_id(name)
        self.values[fid] = self.translator.human_to_stored(name, value)

    def set_stored(self, name: FieldName, value: Any) -> None:
        self.values[self.translator.name_to_id(name)] = value

    def update_values(self, values: Mapping[FieldName, Any]) -> "Entry":
        """Set fields from a name-keyed mapping of human values."""
        for name, value in values.items():
            self.set_field(name, value)
        return self

    # Dict-like access by field name

    def __getitem__(self, name: FieldName) -> Any:
        return self.get(name)

    def __setitem__(self, name: FieldName, value: Any) -> None:
        self.set_field(name, value)

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, str) or not self.translator.has_field(name):
            return False
        return self.translator.name_to_id(name) in self.values

    def __iter__(self) -> Iterator[FieldName]:
        names = self.translator.schema.field_id_to_name
        return iter([names[fid] for fid in sorted(self.values) if fid in names])

    def __len__(self) -> int:
        return len(self.values)

    # ------------------------------------------------------------- payloads

    def updatable_values(self, strict: bool = False) -> Dict[FieldId, Any]:
        """
        Stored values of the fields a client may write.

        :param strict: Raise instead of silently skipping fields that are set but
            not updatable (system and display-only fields).
        :type strict: bool
        :raises ValidationError: In strict mode, if a non-updatable field is set.
        """
        names = self.translator.schema.field_id_to_name
        updatable = self.translator.schema.field_to_updatable
        out: Dict[FieldId, Any] = {}
        for fid, value in self.values.items():
            name = names.get(fid)
            if name in updatable:
                out[fid] = value
            elif strict and fid != REQUEST_ID_FIELD and value is not None:
                raise ValidationError(
                    f"field '{name or fid}' of {self.table_name} is not updatable",
                    subcode=VALIDATION_NOT_UPDATABLE,
                    details={"form": self.table_name, "field": name, "field_id": fid},
                )
        return out

    def to_human_dict(self) -> Dict[FieldName, Any]:
        """Field name -> human value for every field that has a value."""
        return self.translator.to_human(self.values)

    def describe(self) -> str:
        """Schema dump of the form with this entry's values filled in."""
        return self.translator.schema.describe(self.to_human_dict())

    def copy(self) -> "Entry":
        return Entry(self.table_name, self.translator, dict(self.values))
