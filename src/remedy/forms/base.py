# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Base class for typed form entities.

An entity wraps one :class:`~remedy.models.entry.Entry` and the client it was
read through. Subclasses declare ``table`` and a ``field_map`` of attribute
name -> backend field name; accessors for every mapped field are generated
when the subclass is defined, and the class is registered under its
``short_name``.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, Any, ClassVar, Dict, List, Optional, Tuple, Type, TypeVar

from ..core._error_codes import MULTIPLICITY_MANY, MULTIPLICITY_NONE, SCHEMA_UNKNOWN_FORM
from ..core.errors import MultiplicityError, SchemaError
from ..models.entry import Entry
from ..models.qualifier import QualifierClause
from ..utils._text import format_date, format_email, format_text, format_text_field

if TYPE_CHECKING:
    from ..client import RemedyClient

logger = logging.getLogger(__name__)

F = TypeVar("F", bound="Form")

_REGISTRY: Dict[str, Type["Form"]] = {}

# Query arguments consumed by Form.read rather than turned into constraints
_READ_OPTIONS = ("max", "first", "sort")


class Section(str, Enum):
    """Text sections an entity can render."""

    PRIMARY = "primary"
    REQUESTOR = "requestor"
    ASSIGNEE = "assignee"
    DESCRIPTION = "description"
    RESOLUTION = "resolution"
    WORKLOG = "worklog"
    AUDIT = "audit"
    SUMMARY = "summary"
    DETAILS = "details"


class FieldProperty:
    """Attribute that reads and writes one backend field of the wrapped entry."""

    def __init__(self, field: str) -> None:
        self.field = field

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    def __get__(self, instance: Optional["Form"], owner: type) -> Any:
        if instance is None:
            return self
        return instance.entry.get(self.field)

    def __set__(self, instance: "Form", value: Any) -> None:
        instance.entry.set_field(self.field, value)


def registered_form(name: str) -> Type["Form"]:
    """
    Entity class registered under ``name``.

    :param name: Short name (``"incident"``) or form name (``"HPD:Help Desk"``).
    :raises SchemaError: If nothing is registered under that name.
    """
    cls = _REGISTRY.get(name.lower())
    if cls is not None:
        return cls
    for candidate in _REGISTRY.values():
        if candidate.table == name:
            return candidate
    raise SchemaError(
        f"no form registered as '{name}'",
        subcode=SCHEMA_UNKNOWN_FORM,
        details={"name": name, "registered": sorted(_REGISTRY)},
    )


def registered() -> List[str]:
    return sorted(_REGISTRY)


class Form:
    """
    One entry of a Remedy form, with named accessors.

    Subclasses set:

    - ``table``: backend form name.
    - ``short_name``: registry key used by :meth:`RemedyClient.form`.
    - ``field_map``: attribute name -> backend field name.
    - ``sections``: sections :meth:`print_text` renders, in order.

    :param client: Client the entry was read through.
    :type client: ~remedy.client.RemedyClient
    :param entry: Wrapped entry.
    :type entry: ~remedy.models.entry.Entry
    """

    table: ClassVar[str] = ""
    short_name: ClassVar[str] = ""
    field_map: ClassVar[Dict[str, str]] = {}
    sections: ClassVar[Tuple[Section, ...]] = (Section.DETAILS,)
    query_shortcuts: ClassVar[Tuple[str, ...]] = ()

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        for attr, field in cls.field_map.items():
            existing = getattr(cls, attr, None)
            if existing is not None and not isinstance(existing, FieldProperty):
                raise TypeError(f"{cls.__name__}.field_map entry '{attr}' shadows an attribute")
            prop = FieldProperty(field)
            prop.__set_name__(cls, attr)
            setattr(cls, attr, prop)
        if cls.short_name:
            _REGISTRY[cls.short_name.lower()] = cls

    def __init__(self, client: "RemedyClient", entry: Entry) -> None:
        self._client = client
        self.entry = entry

    def __repr__(self) -> str:
        return f"{type(self).__name__}(table={self.table!r}, request_id={self.request_id!r})"

    @property
    def client(self) -> "RemedyClient":
        return self._client

    @property
    def request_id(self) -> Optional[str]:
        return self.entry.request_id

    # ------------------------------------------------------------- fields

    @classmethod
    def field_name(cls, name: str) -> str:
        """Backend field name of attribute ``name``; other names pass through."""
        return cls.field_map.get(name, name)

    def get(self, name: str, default: Any = None) -> Any:
        """Human value by attribute or backend field name."""
        return self.entry.get(self.field_name(name), default)

    def set(self: F, **fields: Any) -> F:
        """Set fields by attribute or backend field name. Returns self."""
        for name, value in fields.items():
            self.entry.set_field(self.field_name(name), value)
        return self

    def to_dict(self) -> Dict[str, Any]:
        """Attribute name -> human value for every mapped field."""
        return {attr: self.entry.get(field) for attr, field in self.field_map.items()}

    # ------------------------------------------------------------- queries

    @classmethod
    def default_query(cls, client: "RemedyClient", args: Dict[str, Any]) -> Dict[str, Any]:
        """
        Adjust query arguments before constraints are built.

        Subclasses override this to add defaults and to turn shortcut
        arguments into field constraints or ``extra`` clauses.
        """
        return args

    @classmethod
    def qualifier(cls, client: "RemedyClient", **args: Any) -> QualifierClause:
        """
        Qualifier :meth:`read` would send for ``args``.

        ``limit`` replaces the whole qualifier. Otherwise arguments go through
        :meth:`default_query`; ``extra`` holds raw clauses and every other key
        is an attribute or backend field name with its constraint.
        """
        raw = args.pop("limit", None)
        if raw:
            return QualifierClause(raw)
        args = {k if k in cls.query_shortcuts else cls.field_name(k): v for k, v in args.items()}
        args = cls.default_query(client, args)
        extra = args.pop("extra", None) or []
        if isinstance(extra, str):
            extra = [extra]
        return client.schema.qualifier(cls.table).build(args, extra)

    @classmethod
    def read(cls: Type[F], client: "RemedyClient", **args: Any) -> List[F]:
        """
        Entities matching ``args``.

        :param client: Client to read through.
        :type client: ~remedy.client.RemedyClient
        :param args: Constraints by attribute or field name, plus ``extra``,
            ``limit``, ``max``, ``first`` and ``sort``, and any shortcut the
            subclass understands.
        :return: Matching entities; empty when nothing constrains the query.
        :rtype: list
        """
        options = {k: args.pop(k) for k in _READ_OPTIONS if k in args}
        qualifier = cls.qualifier(client, **args)
        if not qualifier:
            logger.debug("%s: empty qualifier, nothing read", cls.table)
            return []
        entries = client.records.read_where(cls.table, qualifier, **options)
        logger.debug("%d entr%s returned", len(entries), "y" if len(entries) == 1 else "ies")
        return [cls(client, e) for e in entries]

    @classmethod
    def read_one(cls: Type[F], client: "RemedyClient", missing_ok: bool = False, **args: Any) -> Optional[F]:
        """
        The single entity matching ``args``.

        :raises MultiplicityError: If several match, or none match and not ``missing_ok``.
        """
        found = cls.read(client, **args)
        if len(found) > 1:
            raise MultiplicityError(
                f"too many matches in {cls.table}",
                subcode=MULTIPLICITY_MANY,
                count=len(found),
                details={"form": cls.table},
            )
        if not found:
            if missing_ok:
                return None
            raise MultiplicityError(
                f"no match in {cls.table}", subcode=MULTIPLICITY_NONE, count=0, details={"form": cls.table}
            )
        return found[0]

    # ------------------------------------------------------------- writes

    @classmethod
    def create(cls: Type[F], client: "RemedyClient", **values: Any) -> F:
        """New, unsaved entity with optional initial values by attribute or field name."""
        obj = cls(client, client.records.new(cls.table))
        obj.set(**values)
        return obj

    def save(self: F) -> F:
        """Create or update the entry, then refresh it from the server."""
        self.entry = self._client.records.save(self.entry)
        return self

    def reload(self: F) -> F:
        """Re-read the entry from the server, discarding unsaved changes."""
        if self.request_id:
            self.entry = self._client.records.get(self.table, self.request_id)
        return self

    def delete(self) -> None:
        if self.request_id:
            self._client.records.delete(self.table, self.request_id)

    # ------------------------------------------------------------- text

    @property
    def wrap(self) -> int:
        return self._client.config.wrap

    def format_fields(self, *pairs: Tuple[str, Any]) -> str:
        """Aligned ``Label: value`` block in the house layout."""
        return format_text_field(pairs, minwidth=20, prefix="  ", width=self.wrap)

    def format_text(self, text: Optional[str]) -> str:
        return format_text(text, prefix="  ", width=self.wrap)

    def format_date(self, value: Any) -> str:
        return format_date(value)

    def format_email(self, name: Optional[str], email: Optional[str]) -> str:
        return format_email(name, email, self._client.config.domain)

    def render(self, *sections: Section) -> str:
        """
        Text of the requested sections, separated by blank lines.

        Sections with nothing to show are left out.

        :raises ValueError: If the entity cannot render a section.
        """
        parts = []
        for section in sections or self.sections:
            section = Section(section)
            func = getattr(self, f"text_{section.value}", None)
            if func is None:
                raise ValueError(f"{type(self).__name__} cannot render section '{section.value}'")
            text = func()
            if text:
                parts.append(text)
        return "\n".join(parts)

    def print_text(self) -> str:
        return self.render(*self.sections)

    def text_details(self) -> str:
        """Every mapped field with its value."""
        return self.format_fields(*[(attr, self.entry.get(field)) for attr, field in self.field_map.items()])
