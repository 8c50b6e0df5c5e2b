# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Server permission groups (``Group``)."""

from __future__ import annotations

from .base import Form, Section


class Group(Form):
    table = "Group"
    short_name = "group"
    sections = (Section.DETAILS,)
    field_map = {
        "id": "Request ID",
        "group_id": "Group ID",
        "name": "Group Name",
        "summary": "Long Group Name",
        "description": "Comments",
    }

    def text_details(self) -> str:
        return f"Group information for '{self.name}'\n" + self.format_fields(
            ("Name", self.name),
            ("Summary", self.summary),
            ("Description", self.description),
        )
