# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Field name and value translation for one form.

:class:`FieldTranslator` resolves human field names to the numeric field ids
the server uses and converts values between their human form (enum labels,
local date strings) and their stored form (enum codes, epoch seconds).
"""

from __future__ import annotations

import datetime as _dt
from typing import Any, Dict, Iterable, List, Optional

from dateutil import parser as date_parser

from ..core._error_codes import (
    SCHEMA_UNKNOWN_FIELD,
    SCHEMA_UNKNOWN_FIELD_ID,
    VALIDATION_ENUM_UNRESOLVED,
    VALIDATION_TIME_UNPARSEABLE,
)
from ..core.errors import SchemaError, ValidationError
from .schema import FieldId, FieldName, SchemaMetadata

# Local time with its UTC offset, so the repeated hour at the end of
# daylight saving parses back to the same epoch
DATE_FORMAT = "%Y-%m-%d %H:%M:%S %z"


def parse_time(value: Any) -> Optional[int]:
    """
    Best-effort conversion of a time value to epoch seconds.

    Integers and digit strings are taken as epoch seconds already; datetimes
    are converted directly; anything else goes through ``dateutil``. Naive
    times are read as local time.

    :param value: Time value to convert.
    :return: Epoch seconds, or None if the value cannot be parsed.
    :rtype: int or None
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    if isinstance(value, _dt.datetime):
        return int(value.timestamp())
    if isinstance(value, _dt.date):
        return int(_dt.datetime(value.year, value.month, value.day).timestamp())
    text = str(value).strip()
    if not text:
        return None
    if text.isdigit():
        return int(text)
    try:
        return int(date_parser.parse(text).timestamp())
    except (ValueError, OverflowError):
        return None


def format_date(epoch: Any) -> str:
    """Render epoch seconds as local ``YYYY-MM-DD HH:MM:SS +HHMM``; ``(unknown time)`` when empty."""
    if not epoch:
        return "(unknown time)"
    return _dt.datetime.fromtimestamp(int(epoch), _dt.timezone.utc).astimezone().strftime(DATE_FORMAT)


class FieldTranslator:
    """
    Translate field names and values for one form.

    :param schema: Schema metadata of the form.
    :type schema: ~remedy.models.schema.SchemaMetadata

    Example::

        tr = client.schema.translator("HPD:Help Desk")
        tr.name_to_id("Status")                  # 7
        tr.human_to_stored("Status", "Resolved")  # 4
        tr.stored_to_human("Status", 4)           # "Resolved"
    """

    def __init__(self, schema: SchemaMetadata) -> None:
        self.schema = schema
        self._id_to_name: Dict[FieldId, FieldName] = schema.field_id_to_name

    @property
    def form_name(self) -> str:
        return self.schema.form_name

    # ------------------------------------------------------------- names

    def name_to_id(self, name: FieldName) -> FieldId:
        """
        :raises SchemaError: If the form has no field called ``name``.
        """
        try:
            return self.schema.field_name_to_id[name]
        except KeyError:
            raise SchemaError(
                f"no such field '{name}' in {self.form_name}",
                subcode=SCHEMA_UNKNOWN_FIELD,
                details={"form": self.form_name, "field": name},
            ) from None

    def id_to_name(self, field_id: FieldId) -> FieldName:
        """
        :raises SchemaError: If the form has no field with id ``field_id``.
        """
        try:
            return self._id_to_name[int(field_id)]
        except (KeyError, ValueError, TypeError):
            raise SchemaError(
                f"no such field id '{field_id}' in {self.form_name}",
                subcode=SCHEMA_UNKNOWN_FIELD_ID,
                details={"form": self.form_name, "field_id": field_id},
            ) from None

    def names_to_ids(self, names: Iterable[FieldName]) -> List[FieldId]:
        return [self.name_to_id(n) for n in names]

    def ids_to_names(self, field_ids: Iterable[FieldId]) -> List[FieldName]:
        return [self.id_to_name(i) for i in field_ids]

    def has_field(self, name: FieldName) -> bool:
        return name in self.schema.field_name_to_id

    # ------------------------------------------------------------- types

    def field_type(self, name: FieldName) -> Optional[str]:
        self.name_to_id(name)
        return self.schema.field_to_datatype.get(name)

    def field_is(self, datatype: str, name: FieldName) -> bool:
        """True if ``name`` is a field of type ``datatype`` (``"enum"``, ``"time"``, ...)."""
        return self.field_type(name) == datatype

    def enum_values(self, name: FieldName) -> Dict[int, str]:
        """``{code: label}`` for an enum field; empty for other fields."""
        return dict(self.schema.field_to_enum_values.get(name, {}))

    def enum_code(self, name: FieldName, label: Any) -> Optional[int]:
        """
        Resolve an enum label to its code.

        Labels must match exactly, case included. A code that is already valid
        for the field is returned as is.

        :return: The code, or None if the label is unknown.
        :rtype: int or None
        """
        table = self.schema.field_to_enum_values.get(name, {})
        if isinstance(label, int) and not isinstance(label, bool):
            return label if label in table else None
        text = str(label)
        for code, item in table.items():
            if item == text:
                return code
        return None

    def is_updatable(self, name: FieldName) -> bool:
        self.name_to_id(name)
        return name in self.schema.field_to_updatable

    # ------------------------------------------------------------- values

    def human_to_stored(self, name: FieldName, value: Any) -> Any:
        """
        Convert a human value to the stored representation.

        :raises SchemaError: If the field does not exist.
        :raises ValidationError: If an enum label or a time cannot be resolved.
        """
        if value is None:
            self.name_to_id(name)
            return None
        datatype = self.field_type(name)
        if datatype == "enum":
            code = self.enum_code(name, value)
            if code is None:
                raise ValidationError(
                    f"invalid value '{value}' for enum field '{name}'",
                    subcode=VALIDATION_ENUM_UNRESOLVED,
                    details={"form": self.form_name, "field": name, "value": value},
                )
            return code
        if datatype == "time":
            epoch = parse_time(value)
            if epoch is None:
                raise ValidationError(
                    f"cannot parse '{value}' as a time for field '{name}'",
                    subcode=VALIDATION_TIME_UNPARSEABLE,
                    details={"form": self.form_name, "field": name, "value": value},
                )
            return epoch
        return value

    def stored_to_human(self, name: FieldName, value: Any) -> Any:
        """
        Convert a stored value to its human representation.

        Unknown enum codes come back as None.
        """
        if value is None:
            return None
        datatype = self.field_type(name)
        if datatype == "enum":
            try:
                return self.schema.field_to_enum_values.get(name, {}).get(int(value))
            except (TypeError, ValueError):
                return None
        if datatype == "time":
            return format_date(value)
        return value

    def to_stored(self, values: Dict[FieldName, Any]) -> Dict[FieldId, Any]:
        """Translate a name-keyed dict of human values to an id-keyed dict of stored values."""
        return {self.name_to_id(n): self.human_to_stored(n, v) for n, v in values.items()}

    def to_human(self, values: Dict[FieldId, Any]) -> Dict[FieldName, Any]:
        """Translate an id-keyed dict of stored values; ids without a known field are skipped."""
        out: Dict[FieldName, Any] = {}
        for fid, v in values.items():
            name = self._id_to_name.get(int(fid))
            if name is not None:
                out[name] = self.stored_to_human(name, v)
        return out
