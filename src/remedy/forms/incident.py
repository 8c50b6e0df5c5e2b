# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Help desk incidents (``HPD:Help Desk``)."""

from __future__ import annotations

import logging
import re
import time
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from .audit import Audit
from .base import Form, Section
from .ticketgen import TicketGen
from .worklog import WorkLog

if TYPE_CHECKING:
    from ..client import RemedyClient

logger = logging.getLogger(__name__)

STATUS_RESOLVED = "Resolved"
STATUS_CLOSED = "Closed"
STATUS_ASSIGNED = "Assigned"
REASON_NO_FURTHER_ACTION = "No Further Action Required"

_INC_PREFIX_RE = re.compile(r"^INC0+")


class Incident(Form):
    """
    A help desk incident.

    Reads default to the configured company, organization, support group and
    assignee; pass ``"%"`` for any of those to widen the search.

    Query shortcuts understood by :meth:`read`:

    - ``incnum``: exactly one incident number; every other argument is ignored.
    - ``status``: ``"open"`` (before Resolved), ``"closed"`` (Resolved or
      later), or a literal status.
    - ``groups``: support group names (or objects with a ``name``), any of which may match.
    - ``assigned_user``, ``submitted_user``: login ids.
    - ``unassigned``: only incidents with no assignee.
    - ``last_modify_before``, ``submit_before``: times (epoch or date text).

    Example::

        for inc in Incident.read(client, status="open", groups=["ITS Unix Systems"]):
            print(inc.summary_text())
    """

    table = "HPD:Help Desk"
    short_name = "incident"
    query_shortcuts = (
        "incnum",
        "status",
        "groups",
        "assigned_user",
        "submitted_user",
        "unassigned",
        "last_modify_before",
        "submit_before",
    )
    sections = (Section.PRIMARY, Section.REQUESTOR, Section.ASSIGNEE, Section.DESCRIPTION, Section.RESOLUTION)
    field_map = {
        "id": "Entry ID",
        "date_submit": "Submit Date",
        "assignee_sunet": "Assignee Login ID",
        "date_modified": "Last Modified Date",
        "status": "Status",
        "sunet": "SUNet ID+",
        "requestor_affiliation": "SU Affiliation_chr",
        "requestor_email": "Requester Email_chr",
        "incident_type": "Incident Type",
        "summary": "Description",
        "requestor_last_name": "Last Name",
        "requestor_first_name": "First Name",
        "requestor_phone": "Phone Number",
        "status_reason": "Status_Reason",
        "resolution": "Resolution",
        "inc_num": "Incident Number",
        "urgency": "Urgency",
        "impact": "Impact",
        "priority": "Priority",
        "description": "Detailed Decription",
        "assignee_group": "Assigned Group",
        "assignee_name": "Assignee",
        "time_spent": "Time Spent (min)",
        "total_time_spent": "Total Time Spent (min)",
        "date_resolution": "Estimated Resolution Date",
    }

    # ------------------------------------------------------------- queries

    @classmethod
    def default_query(cls, client: "RemedyClient", args: Dict[str, Any]) -> Dict[str, Any]:
        incnum = args.pop("incnum", None)
        if incnum:
            return {"Incident Number": incnum}

        config = client.config
        extra = args.pop("extra", None) or []
        extra = [extra] if isinstance(extra, str) else list(extra)

        groups = args.pop("groups", None)
        if groups:
            if isinstance(groups, str):
                groups = [groups]
            names = [getattr(g, "name", g) for g in groups]
            extra.append(client.schema.qualifier(cls.table).any_of("Assigned Group", names))
            args["Assigned Group"] = "%"

        args["Assigned Support Company"] = args.get("Assigned Support Company") or config.company or "%"
        args["Assigned Support Organization"] = args.get("Assigned Support Organization") or config.sub_org or "%"
        args["Assigned Group"] = args.get("Assigned Group") or config.workgroup or "%"

        status = args.pop("status", None)
        if status:
            lowered = str(status).lower()
            if lowered == "open":
                args["Status"] = f"-{STATUS_RESOLVED}"
            elif lowered == "closed":
                args["Status"] = f"+={STATUS_RESOLVED}"
            else:
                args["Status"] = status

        assigned = args.pop("assigned_user", None)
        args["Assignee Login ID"] = assigned or args.get("Assignee Login ID") or config.username or "%"

        submitted = args.pop("submitted_user", None)
        if submitted:
            args["SUNet ID+"] = submitted

        if args.pop("unassigned", False):
            args["Assignee Login ID"] = None

        modified = args.pop("last_modify_before", None)
        if modified:
            args["Last Modified Date"] = f"-{modified}"

        submitted_before = args.pop("submit_before", None)
        if submitted_before:
            args["Submit Date"] = f"-{submitted_before}"

        if extra:
            args["extra"] = extra
        return args

    # ------------------------------------------------------------- actions

    def set_status(self, status: str, reason: Optional[str] = None) -> "Incident":
        """Set the status (and optionally the status reason). Not saved."""
        self.status = status
        if reason is not None:
            self.status_reason = reason
        return self

    def assign(self, group: Optional[str] = None, user: Optional[str] = None) -> "Incident":
        """Assign to a support group and/or a login id and mark as Assigned. Not saved."""
        if group is not None:
            self.assignee_group = group
        if user is not None:
            self.assignee_sunet = user
        self.status = STATUS_ASSIGNED
        return self

    def resolve(self, text: str, when: Any = None) -> "Incident":
        """Record a resolution and mark Resolved. Not saved."""
        self.resolution = text
        self.date_resolution = when if when is not None else int(time.time())
        self.set_status(STATUS_RESOLVED, REASON_NO_FURTHER_ACTION)
        return self

    def close(self, text: Optional[str] = None) -> "Incident":
        """Mark Closed, recording ``text`` as the resolution when given. Not saved."""
        if text:
            self.resolution = text
        self.status = STATUS_CLOSED
        return self

    # ------------------------------------------------------------- related

    def worklogs(self, **args: Any) -> List[WorkLog]:
        if not self.inc_num:
            return []
        return WorkLog.read(self._client, incnum=self.inc_num, **args)

    def audits(self, **args: Any) -> List[Audit]:
        if not self.inc_num:
            return []
        return Audit.read(self._client, eid=self.id, **args)

    def worklog_create(self, when: Any = None, **values: Any) -> Optional[WorkLog]:
        """New, unsaved work log entry for this incident, submitted ``when`` (default now)."""
        if not self.inc_num:
            return None
        worklog = WorkLog.create(self._client, **values)
        worklog.inc_num = self.inc_num
        worklog.date_submit = when if when is not None else int(time.time())
        return worklog

    def incnum(self, description: Optional[str] = None, user: Optional[str] = None) -> str:
        """
        The incident number, allocating one through the ticket generator when unset.

        The allocated number is stored on this incident but not saved.
        """
        if self.inc_num:
            return self.inc_num
        gen = TicketGen.create(
            self._client,
            description=description or f"Created by {__name__}",
            submitter=user or self._client.config.remedy_user,
        )
        gen.save()
        logger.info("allocated incident number %s", gen.inc_num)
        self.inc_num = gen.inc_num
        return gen.inc_num

    # ------------------------------------------------------------- text

    def assignee(self) -> str:
        return self.format_email(self.assignee_name, self.assignee_sunet)

    def requestor(self) -> str:
        name = " ".join(n for n in (self.requestor_first_name, self.requestor_last_name) if n)
        return self.format_email(name, self.requestor_email)

    def _date(self, field: str) -> str:
        return self.format_date(self.entry.get_stored(self.field_map[field]))

    def text_primary(self) -> str:
        return "Primary Ticket Information\n" + self.format_fields(
            ("Ticket", self.inc_num or "(none set)"),
            ("Summary", self.summary),
            ("Status", self.status or "(not set/invalid)"),
            ("Status Reason", self.status_reason or "(not set)"),
            ("Submitted", self._date("date_submit")),
            ("Urgency", self.urgency or "(not set)"),
            ("Priority", self.priority or "(not set)"),
            ("Incident Type", self.incident_type or "(none)"),
        )

    def text_requestor(self) -> str:
        return "Requestor Info\n" + self.format_fields(
            ("SUNet ID", self.sunet or "(none)"),
            ("Name", self.requestor()),
            ("Phone", self.requestor_phone),
            ("Affiliation", self.requestor_affiliation),
        )

    def text_assignee(self) -> str:
        return "Ticket Assignee Info\n" + self.format_fields(
            ("Group", self.assignee_group or "(unassigned)"),
            ("Name", self.assignee()),
            ("Last Modified", self._date("date_modified")),
        )

    def text_description(self) -> str:
        return "User-Provided Description\n" + self.format_text(self.description or "(none)")

    def text_resolution(self) -> Optional[str]:
        if not self.resolution:
            return None
        return (
            "Resolution\n"
            + self.format_fields(("Date", self._date("date_resolution")))
            + "\n"
            + self.format_text(self.resolution)
        )

    def text_worklog(self) -> str:
        parts = [f"Work Log Entry {i}\n{wl.print_text()}" for i, wl in enumerate(self.worklogs(), 1)]
        if not parts:
            return "No WorkLog Entries\n"
        return "\n".join(parts)

    def text_audit(self) -> str:
        parts = [f"Audit Entry {i}\n{a.print_text()}" for i, a in enumerate(self.audits(), 1)]
        if not parts:
            return "No Audit Information\n"
        return f"Audit Entries ({len(parts)})\n" + "\n".join(parts)

    def text_summary(self) -> str:
        return "Summary Ticket Information\n" + self.format_fields(
            ("WorkLog Entries", len(self.worklogs())),
            ("Audit Entries", len(self.audits())),
            ("Time Spent (mins)", self.total_time_spent or 0),
        )

    def summary_text(self) -> str:
        """Three-line listing: number, people, group and status; dates; summary."""
        inc_num = _INC_PREFIX_RE.sub("", self.inc_num or "")
        request = (self.sunet or "").rstrip()
        if not request or request == "NO_SUNETID":
            request = "(none)"
        assign = (self.assignee_sunet or "(none)").rstrip()
        group = (self.assignee_group or "(none)").rstrip()
        summary = (self.summary or "").rstrip()
        lines = [
            "%-8s   %-8s   %-8s   %-32s  %12s" % (inc_num, request, assign, group, self.status or "(not set)"),
            "  Created: %s   Updated: %s" % (self._date("date_submit"), self._date("date_modified")),
            "  Summary: %s" % summary,
        ]
        return "\n".join(lines) + "\n"
