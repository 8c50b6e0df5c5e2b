# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Incident number allocation (``HPD:CFG Ticket Num Generator``)."""

from __future__ import annotations

from typing import Optional

from .base import Form, Section

INCIDENT_PREFIX = "INC"
INCIDENT_DIGITS = 12


class TicketGen(Form):
    """
    Creating an entry in the generator form allocates the next incident
    number; the number is derived from the new entry's request id.
    """

    table = "HPD:CFG Ticket Num Generator"
    short_name = "ticketgen"
    sections = (Section.DETAILS,)
    field_map = {
        "id": "Request ID",
        "submitter": "Submitter",
        "description": "Short Description",
    }

    @property
    def inc_num(self) -> Optional[str]:
        """``INC`` plus the request id, zero-padded; None until saved."""
        rid = self.request_id
        if not rid:
            return None
        return f"{INCIDENT_PREFIX}{int(rid):0{INCIDENT_DIGITS}d}"

    def text_details(self) -> str:
        return self.format_fields(
            ("Number", self.inc_num or "(not allocated)"),
            ("Submitter", self.submitter),
            ("Description", self.description),
        )
