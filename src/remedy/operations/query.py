# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Constraint-based query operations namespace."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Iterable, List, Mapping, Optional, Sequence

import pandas as pd

from ..data._session import SortSpec
from ..models.entry import Entry
from ..utils._pandas import entries_to_dataframe

if TYPE_CHECKING:
    from ..client import RemedyClient

logger = logging.getLogger(__name__)


class QueryOperations:
    """
    Queries built from ``{field name: constraint}`` mappings.

    Accessed via ``client.query``. Constraints follow the qualifier rules:
    ``"%"`` drops a field, None tests for null, enum and time values accept a
    ``+``, ``-``, ``+=`` or ``-=`` comparison prefix.

    Example::

        open_tickets = client.query.where(
            "HPD:Help Desk",
            {"Status": "-Resolved", "Assigned Group": "ITS Unix Systems"},
        )
        df = client.query.dataframe("HPD:Help Desk", {"Status": "Assigned"})
    """

    def __init__(self, client: "RemedyClient") -> None:
        """
        Initialize QueryOperations.

        :param client: Parent RemedyClient instance.
        :type client: RemedyClient
        """
        self._client = client

    def qualifier(self, form: str, constraints: Mapping[str, Any], extra: Optional[Iterable[str]] = None) -> str:
        """The qualifier :meth:`where` would send for these constraints."""
        return self._client.schema.qualifier(form).build(constraints, extra)

    def where(
        self,
        form: str,
        constraints: Optional[Mapping[str, Any]] = None,
        extra: Optional[Iterable[str]] = None,
        fields: Optional[Sequence[str]] = None,
        max: Optional[int] = None,
        first: int = 0,
        sort: Optional[SortSpec] = None,
    ) -> List[Entry]:
        """
        Entries of ``form`` matching ``constraints``.

        :param form: Form name.
        :type form: str
        :param constraints: Field name -> constraint.
        :type constraints: dict or None
        :param extra: Raw qualifier clauses ANDed onto the generated ones.
        :type extra: iterable of str or None
        :param fields: Field names to fetch; every known field when None.
        :type fields: list[str] or None
        :param max: Maximum number of entries; defaults to the configured search count.
        :type max: int or None
        :param first: Number of entries to skip.
        :type first: int
        :param sort: Sort order by field id.
        :return: Matching entries; empty when nothing constrains the query.
        :rtype: list[~remedy.models.entry.Entry]
        """
        qualifier = self.qualifier(form, constraints or {}, extra)
        if not qualifier:
            logger.debug("no constraints for %s; not searching", form)
            return []
        if max is None:
            max = self._client.config.count
        logger.debug("read_where (%s, %s)", form, qualifier)
        return self._client.records.read_where(form, qualifier, fields=fields, max=max, first=first, sort=sort)

    def dataframe(
        self,
        form: str,
        constraints: Optional[Mapping[str, Any]] = None,
        fields: Optional[Sequence[str]] = None,
        **kwargs: Any,
    ) -> pd.DataFrame:
        """
        Matching entries as a pandas DataFrame of human values, one row per entry.

        Accepts the same arguments as :meth:`where`. Columns are the requested
        ``fields`` (in order) when given.
        """
        entries = self.where(form, constraints, fields=fields, **kwargs)
        return entries_to_dataframe(entries, columns=fields)
