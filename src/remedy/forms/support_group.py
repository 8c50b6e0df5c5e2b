# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Support groups (``CTM:Support Group``)."""

from __future__ import annotations

from typing import List

from .association import Association
from .base import Form, Section
from .people import Person


class SupportGroup(Form):
    table = "CTM:Support Group"
    short_name = "supportgroup"
    sections = (Section.DETAILS,)
    field_map = {
        "id": "Support Group ID",
        "name": "Support Group Name",
        "email": "Alternate Group Email Address",
    }

    def associations(self) -> List[Association]:
        if not self.id:
            return []
        return Association.read(self._client, group_id=self.id)

    def members(self) -> List[Person]:
        """People associated with the group; dangling associations are skipped."""
        people = [a.person() for a in self.associations()]
        return [p for p in people if p is not None]

    def text_details(self) -> str:
        people = self.members()
        out = f"Group information for '{self.name}'\n" + self.format_fields(
            ("Name", self.name),
            ("Group Email Address", self.email or "(none)"),
            ("Number of Members", len(people)),
        )
        return out + "".join(f"    {p.name}\n" for p in people)
