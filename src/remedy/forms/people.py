# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""People (``CTM:People``)."""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

from .association import Association
from .base import Form, Section

if TYPE_CHECKING:
    from .support_group import SupportGroup


class Person(Form):
    """
    A person known to the help desk, with their support group memberships.

    Example::

        person = Person.read_one(client, netid="jdoe")
        for group in person.groups():
            print(group.name)
    """

    table = "CTM:People"
    short_name = "people"
    sections = (Section.DETAILS,)
    field_map = {
        "id": "Person ID",
        "netid": "SUNET ID",
        "name": "Full Name",
        "first_name": "First Name",
        "last_name": "Last Name",
        "department": "Department",
        "phone": "Phone Number Business",
    }

    def associations(self) -> List[Association]:
        if not self.id:
            return []
        return Association.read(self._client, person_id=self.id)

    def groups(self) -> List["SupportGroup"]:
        groups = [a.group() for a in self.associations()]
        return [g for g in groups if g is not None]

    def text_details(self) -> Optional[str]:
        user = self.netid
        if not user:
            return None
        groups = self.groups()
        full_name = " ".join(n for n in (self.first_name, self.last_name) if n)
        out = f"Person information for '{user}'\n" + self.format_fields(
            ("Name", self.format_email(full_name, user)),
            ("Department", self.department),
            ("Phone", self.phone),
            ("Support Groups", len(groups) or "(none)"),
        )
        return out + "".join(f"    {g.name}\n" for g in groups)
