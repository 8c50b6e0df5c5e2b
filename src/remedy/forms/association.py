# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Person to support group links (``CTM:Support Group Association``)."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from .base import Form, Section

if TYPE_CHECKING:
    from .people import Person
    from .support_group import SupportGroup


class Association(Form):
    """Membership of one person in one support group, with a role."""

    table = "CTM:Support Group Association"
    short_name = "sga"
    sections = (Section.DETAILS,)
    field_map = {
        "id": "Support Group Association ID",
        "group_id": "Support Group ID",
        "login": "Login ID",
        "name": "Full Name",
        "person_id": "Person ID",
        "role": "Support Group Association Role",
    }

    def group(self) -> Optional["SupportGroup"]:
        from .support_group import SupportGroup

        if not self.group_id:
            return None
        return SupportGroup.read_one(self._client, id=self.group_id, missing_ok=True)

    def person(self) -> Optional["Person"]:
        from .people import Person

        if not self.person_id:
            return None
        return Person.read_one(self._client, id=self.person_id, missing_ok=True)

    def text_details(self) -> str:
        group = self.group()
        if group is None:
            return f"no such group: {self.group_id}\n"
        return f"SGA information for '{self.name}'\n" + self.format_fields(
            ("ID", self.id),
            ("Person", self.format_email(self.name, self.login)),
            ("Group", group.name),
            ("Role", self.role),
        )
