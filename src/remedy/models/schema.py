# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Per-form field schema metadata.

A :class:`SchemaMetadata` holds everything the client needs to translate
between field names and field ids for one form: data types, enum value
tables, defaults and which fields may be written. It is assembled once from
the two schema calls of a session (field table and field properties) and
then cached.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Set, Union

from ..core._error_codes import SCHEMA_BAD_ENUM_LIMITS
from ..core.errors import SchemaError

logger = logging.getLogger(__name__)

# Type aliases for semantic clarity
FieldId = int
FieldName = str

# AR System data type codes -> canonical type names
DATATYPE_CODE_TO_TEXT = {
    0: "null",
    1: "keyword",
    2: "integer",
    3: "real",
    4: "char",
    5: "diary",
    6: "enum",
    7: "time",
    8: "bitmask",
    9: "bytes",
    10: "decimal",
    11: "attach",
    12: "currency",
    13: "date",
    14: "time_of_day",
    31: "trim",
    32: "control",
    33: "table",
    34: "column",
    35: "page",
    36: "page_holder",
    37: "attach_pool",
}

# REST API spellings that differ from the canonical names
_DATATYPE_ALIASES = {
    "character": "char",
    "selection": "enum",
    "attachment": "attach",
    "attachment_pool": "attach_pool",
    "datetime": "time",
}

# Field option codes; 1 and 2 are updatable
FOPT_CODE_TO_DESC = {
    1: "required",
    2: "optional",
    3: "system",
    4: "display_only",
}
_FOPT_DESC_TO_CODE = {v: k for k, v in FOPT_CODE_TO_DESC.items()}

# Status History is not a real field and the server rejects it in selections
STATUS_HISTORY_FIELD_ID = 15

# Attachment fields are rejected in selection queries as well
EXCLUDED_DATATYPES = frozenset({"attach", "attach_pool"})

# Width of the label column in describe() output
LINE_PREFIX = 35


def normalize_datatype(value: Union[int, str, None]) -> Optional[str]:
    """
    Map a data type code or name from either transport to its canonical name.

    :param value: Numeric AR data type code or a type name in any case.
    :type value: int or str or None
    :return: Canonical type name such as ``"enum"`` or ``"time"``.
    :rtype: str or None
    """
    if value is None:
        return None
    if isinstance(value, int):
        return DATATYPE_CODE_TO_TEXT.get(value, str(value))
    text = str(value).strip().lower()
    if text.isdigit():
        return DATATYPE_CODE_TO_TEXT.get(int(text), text)
    return _DATATYPE_ALIASES.get(text, text)


def normalize_option(value: Union[int, str, None]) -> Optional[int]:
    """Map a field option (``1``-``4`` or ``"REQUIRED"``, ``"display_only"`` ...) to its code."""
    if value is None:
        return None
    if isinstance(value, int):
        return value
    text = str(value).strip().lower()
    if text.isdigit():
        return int(text)
    return _FOPT_DESC_TO_CODE.get(text)


def _enum_table(field_id: FieldId, limit: Any) -> Dict[int, str]:
    """
    Build ``{code: label}`` from an enum limit structure.

    Two layouts exist: a custom list of ``{"itemNumber", "itemName"}`` pairs, and
    a regular list of labels numbered from zero.
    """
    enum_limits = limit.get("enumLimits") if isinstance(limit, Mapping) else None
    if isinstance(enum_limits, Mapping):
        if "customList" in enum_limits:
            table: Dict[int, str] = {}
            for item in enum_limits["customList"] or []:
                table[int(item["itemNumber"])] = item["itemName"]
            return table
        if "regularList" in enum_limits:
            return {i: label for i, label in enumerate(enum_limits["regularList"] or [])}
    raise SchemaError(
        f"don't know how to deal with enum limit ({field_id}): {limit!r}",
        subcode=SCHEMA_BAD_ENUM_LIMITS,
        details={"field_id": field_id},
    )


@dataclass
class SchemaMetadata:
    """
    Field schema of one Remedy form.

    :param form_name: Name of the form, e.g. ``"HPD:Help Desk"``.
    :type form_name: str
    :param field_name_to_id: Field name -> field id.
    :type field_name_to_id: dict[str, int]
    :param field_to_datatype: Field name -> canonical type name.
    :type field_to_datatype: dict[str, str]
    :param field_to_enum_values: Field name -> ``{code: label}`` for enum fields.
    :type field_to_enum_values: dict[str, dict[int, str]]
    :param field_to_default: Field name -> server-side default value.
    :type field_to_default: dict[str, Any]
    :param field_to_option: Field name -> option code (1 required, 2 optional,
        3 system, 4 display only).
    :type field_to_option: dict[str, int]
    :param field_to_updatable: Names of fields a client may write.
    :type field_to_updatable: set[str]
    """

    form_name: str
    field_name_to_id: Dict[FieldName, FieldId] = field(default_factory=dict)
    field_to_datatype: Dict[FieldName, str] = field(default_factory=dict)
    field_to_enum_values: Dict[FieldName, Dict[int, str]] = field(default_factory=dict)
    field_to_default: Dict[FieldName, Any] = field(default_factory=dict)
    field_to_option: Dict[FieldName, int] = field(default_factory=dict)
    field_to_updatable: Set[FieldName] = field(default_factory=set)

    @property
    def field_id_to_name(self) -> Dict[FieldId, FieldName]:
        """Field id -> field name, derived from :attr:`field_name_to_id`."""
        return {fid: name for name, fid in self.field_name_to_id.items()}

    @property
    def field_names(self) -> List[FieldName]:
        """Field names ordered by field id."""
        return sorted(self.field_name_to_id, key=lambda n: self.field_name_to_id[n])

    def __contains__(self, name: object) -> bool:
        return name in self.field_name_to_id

    def __len__(self) -> int:
        return len(self.field_name_to_id)

    @classmethod
    def assemble(
        cls,
        form_name: str,
        field_table: Mapping[FieldName, FieldId],
        id_to_properties: Mapping[FieldId, Mapping[str, Any]],
    ) -> "SchemaMetadata":
        """
        Build schema metadata from the two schema calls of a session.

        The status history pseudo-field and every attachment-typed field are
        dropped from all maps.

        :param form_name: Name of the form.
        :type form_name: str
        :param field_table: Field name -> field id.
        :type field_table: dict[str, int]
        :param id_to_properties: Field id -> properties with keys ``dataType``,
            ``defaultVal``, ``option`` and ``limit``.
        :type id_to_properties: dict[int, dict]
        :return: Assembled metadata.
        :rtype: SchemaMetadata
        :raises SchemaError: If an enum field carries an enum limit in an unknown layout.
        """
        meta = cls(form_name=form_name)
        excluded: Set[FieldId] = {STATUS_HISTORY_FIELD_ID}
        id_to_name = {int(fid): name for name, fid in field_table.items()}

        for name, fid in field_table.items():
            fid = int(fid)
            props = id_to_properties.get(fid)
            if props is None:
                props = id_to_properties.get(str(fid), {})  # type: ignore[call-overload]
            datatype = normalize_datatype(props.get("dataType"))
            option = normalize_option(props.get("option"))

            meta.field_name_to_id[name] = fid
            meta.field_to_datatype[name] = datatype
            meta.field_to_default[name] = props.get("defaultVal")
            if option is not None:
                meta.field_to_option[name] = option
                if option <= 2:
                    meta.field_to_updatable.add(name)

            if datatype == "enum":
                meta.field_to_enum_values[name] = _enum_table(fid, props.get("limit"))
            if datatype in EXCLUDED_DATATYPES:
                excluded.add(fid)

        for fid in sorted(excluded):
            name = id_to_name.get(fid)
            if name is None:
                continue
            meta.drop_field(name)

        logger.debug("assembled %s: %d fields", form_name, len(meta.field_name_to_id))
        return meta

    def drop_field(self, name: FieldName) -> None:
        """Remove a field from every map."""
        self.field_name_to_id.pop(name, None)
        self.field_to_datatype.pop(name, None)
        self.field_to_enum_values.pop(name, None)
        self.field_to_default.pop(name, None)
        self.field_to_option.pop(name, None)
        self.field_to_updatable.discard(name)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a JSON-compatible dict for the schema cache."""
        return {
            "form_name": self.form_name,
            "field_name_to_id": dict(self.field_name_to_id),
            "field_to_datatype": dict(self.field_to_datatype),
            "field_to_enum_values": {
                name: {str(code): label for code, label in table.items()}
                for name, table in self.field_to_enum_values.items()
            },
            "field_to_default": dict(self.field_to_default),
            "field_to_option": dict(self.field_to_option),
            "field_to_updatable": sorted(self.field_to_updatable),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SchemaMetadata":
        """Rebuild metadata serialized by :meth:`to_dict`; enum codes come back as ints."""
        return cls(
            form_name=data["form_name"],
            field_name_to_id={k: int(v) for k, v in (data.get("field_name_to_id") or {}).items()},
            field_to_datatype=dict(data.get("field_to_datatype") or {}),
            field_to_enum_values={
                name: {int(code): label for code, label in table.items()}
                for name, table in (data.get("field_to_enum_values") or {}).items()
            },
            field_to_default=dict(data.get("field_to_default") or {}),
            field_to_option={k: int(v) for k, v in (data.get("field_to_option") or {}).items()},
            field_to_updatable=set(data.get("field_to_updatable") or ()),
        )

    def describe(self, values: Optional[Mapping[FieldName, Any]] = None) -> str:
        """
        Human-readable dump of every field, sorted by field id.

        Each field gets one line with its value (``<NULL>`` when not in
        ``values``), id, type and option; defaults and enum values follow on
        their own lines.

        :param values: Optional field name -> human value mapping to show.
        :type values: dict or None
        :rtype: str
        """
        values = values or {}
        lines = [_line("Form Name", self.form_name), ""]
        for name in self.field_names:
            fid = self.field_name_to_id[name]
            value = values[name] if name in values else "<NULL>"
            if value is None:
                value = "<NULL>"
            datatype = self.field_to_datatype.get(name) or ""
            option = FOPT_CODE_TO_DESC.get(self.field_to_option.get(name), "")
            lines.append(_line(name, "%s [%10d %8s] %s" % (value, fid, datatype, option)))
            default = self.field_to_default.get(name)
            if default is not None:
                lines.append(_line(" - default", default))
            for code, label in sorted(self.field_to_enum_values.get(name, {}).items()):
                lines.append(_line(" - enum value %-3d" % code, label))
        return "\n".join(lines) + "\n"


def _line(attribute: str, value: Any) -> str:
    prefix = f"{attribute} "
    return prefix + " " * max(LINE_PREFIX - len(prefix), 0) + ("" if value is None else str(value))

