# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Organization chart down to the department level (``CTM:People Organization``)."""

from __future__ import annotations

from .base import Form, Section


class Department(Form):
    """
    One company/organization/department triple.

    Every department::

        for dept in Department.read(client, limit="1=1"):
            print(dept.print_text())
    """

    table = "CTM:People Organization"
    short_name = "department"
    sections = (Section.DETAILS,)
    field_map = {
        "id": "People Organization ID",
        "company": "Company",
        "organization": "Organization",
        "department": "Department",
    }

    def text_details(self) -> str:
        return f"Department information for '{self.department}'\n" + self.format_fields(
            ("ID", self.id),
            ("Company", self.company),
            ("Organization", self.organization),
            ("Department", self.department),
        )
