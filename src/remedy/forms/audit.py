# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Incident audit log (``HPD:HelpDesk_AuditLogSystem``)."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List

from .base import Form, Section

if TYPE_CHECKING:
    from ..client import RemedyClient


class Audit(Form):
    """One audit record: who changed which fields of an incident, and when."""

    table = "HPD:HelpDesk_AuditLogSystem"
    short_name = "audit"
    query_shortcuts = ("eid",)
    sections = (Section.DETAILS,)
    field_map = {
        "id": "Request ID",
        "create_time": "Create Date",
        "inc_ref": "Original Request ID",
        "user": "User",
        "fields": "Fields Changed",
        "data": "Log",
    }

    @classmethod
    def default_query(cls, client: "RemedyClient", args: Dict[str, Any]) -> Dict[str, Any]:
        eid = args.pop("eid", None)
        if eid:
            return {"Original Request ID": eid}
        return args

    def changed_fields(self) -> List[str]:
        """Names in ``Fields Changed``, which the server stores ``;``-separated."""
        return [f for f in (self.fields or "").split(";") if f]

    def text_details(self) -> str:
        return self.format_fields(
            ("Time", self.format_date(self.entry.get_stored("Create Date"))),
            ("Person", self.user),
            ("Changed Fields", "; ".join(self.changed_fields())),
        )
