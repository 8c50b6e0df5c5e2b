# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Qualifier construction from field name / value constraints.

A qualifier is the server's boolean filter expression, comparable to a SQL
``WHERE`` clause. Each constraint becomes one clause ``'<field id>' <op>
<value>`` and the clauses are joined with ``AND``.

Rules per constraint value:

- ``"%"`` means "no constraint" and is dropped.
- ``None`` becomes an explicit null test.
- Enum and time fields accept a comparison prefix: ``+`` (``>``), ``-``
  (``<``), ``+=`` (``>=``), ``-=`` (``<=``) or none (``=``). Enum values may be
  codes or labels; time values may be epoch seconds or date strings.
- Everything else is a quoted equality test.

Enum labels must match exactly, case included.

An enum label that does not resolve turns the whole qualifier into the
always-false ``1=3``; an unparseable time turns it into ``1=2``.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Iterable, List, Mapping, Optional, Tuple

from .schema import FieldName
from .translator import FieldTranslator, parse_time

logger = logging.getLogger(__name__)

# No-constraint marker
WILDCARD = "%"

# Always-false qualifiers produced by unresolvable constraints
FALSE_ENUM = "1=3"
FALSE_TIME = "1=2"

_MODIFIER_RE = re.compile(r"^([+-]?=?)?(.*)$", re.DOTALL)

_MODIFIER_OPS = {
    "-=": "<=",
    "+=": ">=",
    "-": "<",
    "+": ">",
}


class QualifierClause(str):
    """An immutable qualifier fragment such as ``'7' < 4``."""

    __slots__ = ()

    @property
    def always_false(self) -> bool:
        return self in (FALSE_ENUM, FALSE_TIME)


def split_modifier(value: Any) -> Tuple[str, str]:
    """
    Split a comparison prefix off a constraint value.

    :return: ``(modifier, rest)``; the modifier is ``""`` when absent.
    :rtype: tuple[str, str]
    """
    m = _MODIFIER_RE.match(str(value))
    return (m.group(1) or "", m.group(2))


def compare(field_id: int, modifier: str, value: Any) -> QualifierClause:
    """Comparison clause for a numeric value; ``modifier`` picks the operator."""
    op = _MODIFIER_OPS.get(modifier, "=")
    return QualifierClause(f"'{field_id}' {op} {value}")


def quote(value: Any) -> str:
    return '"' + str(value).replace('"', '\\"') + '"'


def join_and(clauses: Iterable[Optional[str]]) -> QualifierClause:
    """Join non-empty clauses with ``AND``."""
    return QualifierClause(" AND ".join(c for c in clauses if c))


def join_or(clauses: Iterable[Optional[str]]) -> QualifierClause:
    """Join non-empty clauses with ``OR`` inside parentheses."""
    parts = [c for c in clauses if c]
    if not parts:
        return QualifierClause("")
    if len(parts) == 1:
        return QualifierClause(parts[0])
    return QualifierClause("(" + " OR ".join(parts) + ")")


class QualifierBuilder:
    """
    Build qualifiers for one form.

    :param translator: Field translator of the form.
    :type translator: ~remedy.models.translator.FieldTranslator

    Example::

        qb = client.schema.qualifier("HPD:Help Desk")
        qb.build({"Status": "-Resolved", "Assigned Group": "ITS Unix Systems"})
        # "'7' < 4 AND '1000000217' = \\"ITS Unix Systems\\""
    """

    def __init__(self, translator: FieldTranslator) -> None:
        self.translator = translator

    def clause(self, field: FieldName, value: Any) -> Optional[QualifierClause]:
        """
        One clause for ``field``.

        :return: The clause, None when the constraint is dropped, or one of the
            always-false qualifiers when the value cannot be resolved.
        :rtype: QualifierClause or None
        :raises SchemaError: If the form has no such field.
        """
        fid = self.translator.name_to_id(field)
        if value is None:
            return QualifierClause(f"'{fid}' = $NULL$")
        if isinstance(value, str) and value == WILDCARD:
            return None

        datatype = self.translator.field_type(field)
        if datatype == "enum":
            modifier, human = split_modifier(value)
            if human.isdigit():
                code: Optional[int] = int(human)
            else:
                code = self.translator.enum_code(field, human)
            if code is None:
                logger.warning("no value '%s' for enum field '%s'; qualifier is always false", human, field)
                return QualifierClause(FALSE_ENUM)
            return compare(fid, modifier, code)

        if datatype == "time":
            if isinstance(value, str):
                modifier, text = split_modifier(value)
            else:
                modifier, text = "", value
            epoch = parse_time(text)
            if epoch is None:
                logger.warning("cannot parse time '%s' for field '%s'; qualifier is always false", text, field)
                return QualifierClause(FALSE_TIME)
            return compare(fid, modifier, epoch)

        return QualifierClause(f"'{fid}' = {quote(value)}")

    def build(
        self,
        constraints: Mapping[FieldName, Any],
        extra: Optional[Iterable[str]] = None,
    ) -> QualifierClause:
        """
        Build a full qualifier from ``{field name: constraint}``.

        :param constraints: Field name -> constraint value.
        :type constraints: dict
        :param extra: Raw clauses appended after the generated ones.
        :type extra: iterable of str or None
        :return: Clauses joined with ``AND``; empty when nothing constrains the
            query; ``1=3`` or ``1=2`` when a constraint cannot be resolved.
        :rtype: QualifierClause
        """
        clauses: List[str] = []
        for field, value in constraints.items():
            c = self.clause(field, value)
            if c is None:
                continue
            if c.always_false:
                return c
            clauses.append(c)
        if extra:
            clauses.extend(extra)
        qualifier = join_and(clauses)
        logger.debug("qualifier for %s: %s", self.translator.form_name, qualifier)
        return qualifier

    def any_of(self, field: FieldName, values: Iterable[Any]) -> QualifierClause:
        """
        ``OR`` group matching ``field`` against any of ``values``.

        Unresolvable values are left out of the group; when none resolve the
        group is the always-false clause.
        """
        clauses = []
        failed: Optional[QualifierClause] = None
        for v in values:
            c = self.clause(field, v)
            if c is None:
                continue
            if c.always_false:
                failed = c
                continue
            clauses.append(c)
        if not clauses and failed is not None:
            return failed
        return join_or(clauses)
