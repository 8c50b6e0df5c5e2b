# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Server login accounts (``User``)."""

from __future__ import annotations

from typing import List, Optional

from .base import Form, Section
from .group import Group


class User(Form):
    table = "User"
    short_name = "user"
    sections = (Section.DETAILS,)
    field_map = {
        "id": "Request ID",
        "group_list": "Group List",
        "name": "Full Name",
        "netid": "Login Name",
    }

    def group_ids(self) -> List[int]:
        """Ids in ``Group List``, stored as ``;``-separated integers."""
        return [int(g) for g in (self.group_list or "").replace(" ", "").split(";") if g.isdigit()]

    def groups(self) -> List[Group]:
        ids = self.group_ids()
        if not ids:
            return []
        builder = self._client.schema.qualifier(Group.table)
        return Group.read(self._client, extra=[builder.any_of("Group ID", ids)])

    def text_details(self) -> Optional[str]:
        user = self.netid
        if not user:
            return None
        out = f"User information for '{user}'\n" + self.format_fields(
            ("Full Name", self.name),
            ("SUNet ID", self.netid or "(none)"),
        )
        return out + "".join(f"    {g.name}\n" for g in self.groups())
