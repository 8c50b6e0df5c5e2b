# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Typed entities over well-known Remedy forms.

Importing this package registers every entity class under its short name
(``incident``, ``worklog``, ``audit``, ``people``, ``supportgroup``, ``sga``,
``ticketgen``, ``user``, ``group``, ``department``).
"""

from .association import Association
from .audit import Audit
from .base import Form, Section, registered, registered_form
from .department import Department
from .group import Group
from .incident import Incident
from .people import Person
from .support_group import SupportGroup
from .ticketgen import TicketGen
from .user import User
from .worklog import WorkLog

__all__ = [
    "Form",
    "Section",
    "registered",
    "registered_form",
    "Association",
    "Audit",
    "Department",
    "Group",
    "Incident",
    "Person",
    "SupportGroup",
    "TicketGen",
    "User",
    "WorkLog",
]
