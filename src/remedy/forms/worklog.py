# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Incident work log entries (``HPD:WorkLog``)."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict

from .base import Form, Section

if TYPE_CHECKING:
    from ..client import RemedyClient


class WorkLog(Form):
    """
    One work log entry of an incident.

    ``incnum`` reads every entry of one incident::

        for wl in WorkLog.read(client, incnum="INC000000012345"):
            print(wl.print_text())
    """

    table = "HPD:WorkLog"
    short_name = "worklog"
    query_shortcuts = ("incnum",)
    sections = (Section.DETAILS,)
    field_map = {
        "id": "Work Log ID",
        "description": "Description",
        "details": "Detailed Description",
        "date_submit": "Work Log Submit Date",
        "submitter": "Work Log Submitter",
        "inc_num": "Incident Number",
    }

    @classmethod
    def default_query(cls, client: "RemedyClient", args: Dict[str, Any]) -> Dict[str, Any]:
        incnum = args.pop("incnum", None)
        if incnum:
            return {"Incident Number": incnum}
        return args

    def text_details(self) -> str:
        out = self.format_fields(
            ("Submitter", self.submitter),
            ("Date", self.format_date(self.entry.get_stored("Work Log Submit Date"))),
            ("Description", self.description),
        )
        return out + "\n" + self.format_text(self.details or "No text provided")
