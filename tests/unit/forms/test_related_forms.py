# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

import pytest

from remedy.forms import Association, Audit, Department, Group, Person, SupportGroup, User

from tests.fixtures.test_data import (
    AUDIT_FORM,
    DEPARTMENT_FORM,
    GROUP_FORM,
    PEOPLE_FORM,
    SGA_FORM,
    SUPPORT_GROUP_FORM,
    USER_FORM,
)

PEOPLE_ROW = {
    4: "jdoe",
    200000006: "Physics",
    1000000017: "Jane Doe",
    1000000018: "Doe",
    1000000019: "Jane",
    1000000056: "555-0100",
    1000000080: "PPL000000000001",
}
GROUP_ROW = {1000000015: "ITS Unix Systems", 1000000048: "unix-team@example.edu", 1000000079: "SGP000000000011"}
SGA_ROW = {
    4: "jdoe",
    179: "SGA000000000101",
    1000000017: "Jane Doe",
    1000000079: "SGP000000000011",
    1000000080: "PPL000000000001",
    1000000171: "Member",
}


def _row(fake_session, form, values):
    rid = fake_session.add_row(form, values)
    return rid, {**values, 1: rid}


@pytest.fixture
def sga(client, fake_session):
    fake_session.add_row(SGA_FORM, SGA_ROW)
    return Association.read_one(client, login="jdoe")


class TestAssociation:
    def test_group_and_person(self, sga, fake_session):
        _, group_row = _row(fake_session, SUPPORT_GROUP_FORM, GROUP_ROW)
        _, person_row = _row(fake_session, PEOPLE_FORM, PEOPLE_ROW)
        fake_session.queue(SUPPORT_GROUP_FORM, [(group_row[1], group_row)])
        fake_session.queue(PEOPLE_FORM, [(person_row[1], person_row)])

        assert sga.group().name == "ITS Unix Systems"
        assert fake_session.calls_named("read")[-1][2] == "'1000000079' = \"SGP000000000011\""
        assert sga.person().netid == "jdoe"

    def test_missing_group(self, sga, fake_session):
        fake_session.queue(SUPPORT_GROUP_FORM, [])
        assert sga.print_text() == "no such group: SGP000000000011\n"

    def test_details(self, sga, fake_session):
        _row(fake_session, SUPPORT_GROUP_FORM, GROUP_ROW)
        text = sga.print_text()
        assert text.startswith("SGA information for 'Jane Doe'\n")
        assert "Jane Doe <jdoe@example.edu>" in text
        assert "  Role:                Member" in text


class TestSupportGroup:
    def test_members(self, client, fake_session):
        _row(fake_session, SUPPORT_GROUP_FORM, GROUP_ROW)
        _row(fake_session, SGA_FORM, SGA_ROW)
        _row(fake_session, PEOPLE_FORM, PEOPLE_ROW)
        group = SupportGroup.read_one(client, name="ITS Unix Systems")

        members = group.members()

        assert [p.name for p in members] == ["Jane Doe"]
        assert ("read", SGA_FORM, "'1000000079' = \"SGP000000000011\"") in fake_session.calls

    def test_dangling_association_is_skipped(self, client, fake_session):
        _row(fake_session, SUPPORT_GROUP_FORM, GROUP_ROW)
        _row(fake_session, SGA_FORM, SGA_ROW)
        group = SupportGroup.read_one(client, name="ITS Unix Systems")
        fake_session.queue(PEOPLE_FORM, [])
        assert group.members() == []

    def test_details(self, client, fake_session):
        _row(fake_session, SUPPORT_GROUP_FORM, GROUP_ROW)
        _row(fake_session, SGA_FORM, SGA_ROW)
        _row(fake_session, PEOPLE_FORM, PEOPLE_ROW)
        text = SupportGroup.read_one(client, name="ITS Unix Systems").print_text()
        assert text.startswith("Group information for 'ITS Unix Systems'\n")
        assert "  Number of Members:   1" in text
        assert text.endswith("    Jane Doe\n")


class TestPerson:
    def test_groups(self, client, fake_session):
        _row(fake_session, PEOPLE_FORM, PEOPLE_ROW)
        _row(fake_session, SGA_FORM, SGA_ROW)
        _row(fake_session, SUPPORT_GROUP_FORM, GROUP_ROW)
        person = Person.read_one(client, netid="jdoe")

        assert [g.name for g in person.groups()] == ["ITS Unix Systems"]
        assert ("read", SGA_FORM, "'1000000080' = \"PPL000000000001\"") in fake_session.calls

    def test_details(self, client, fake_session):
        _row(fake_session, PEOPLE_FORM, PEOPLE_ROW)
        fake_session.queue(SGA_FORM, [])
        text = Person.read_one(client, netid="jdoe").print_text()
        assert text.startswith("Person information for 'jdoe'\n")
        assert "  Name:                Jane Doe <jdoe@example.edu>" in text
        assert "  Support Groups:      (none)" in text

    def test_no_details_without_netid(self, client):
        assert Person.create(client).print_text() == ""


class TestUserAndGroup:
    def test_group_ids(self, client):
        user = User.create(client, group_list="1; 2;x;")
        assert user.group_ids() == [1, 2]

    def test_groups_query(self, client, fake_session):
        _row(fake_session, GROUP_FORM, {8: "Administrators", 105: "Admin", 106: 1})
        _row(fake_session, USER_FORM, {8: "Jane Doe", 101: "jdoe", 104: "1;2;"})
        user = User.read_one(client, netid="jdoe")

        groups = user.groups()

        assert [g.name for g in groups] == ["Admin"]
        assert fake_session.calls_named("read")[-1] == ("read", GROUP_FORM, "('106' = \"1\" OR '106' = \"2\")")

    def test_user_without_groups(self, client, fake_session):
        user = User.create(client, netid="jdoe")
        assert user.groups() == []
        assert fake_session.calls_named("read") == []

    def test_user_details(self, client, fake_session):
        _row(fake_session, GROUP_FORM, {8: "Administrators", 105: "Admin", 106: 1})
        user = User.create(client, netid="jdoe", name="Jane Doe", group_list="1;")
        text = user.print_text()
        assert text.startswith("User information for 'jdoe'\n")
        assert text.endswith("    Admin\n")

    def test_group_details(self, client, fake_session):
        _row(fake_session, GROUP_FORM, {8: "Administrators", 105: "Admin", 106: 1, 2001: "Full access"})
        group = Group.read_one(client, group_id=1)
        assert group.print_text() == (
            "Group information for 'Admin'\n"
            "  Name:                Admin\n"
            "  Summary:             Administrators\n"
            "  Description:         Full access\n"
        )


def test_audit_details(client, fake_session):
    _row(fake_session, AUDIT_FORM, {3: 1700000000, 450: "000000000000042", 451: "asmith", 452: "Status;Urgency"})
    audit = Audit.read_one(client, eid="000000000000042")
    text = audit.print_text()
    assert "  Person:              asmith" in text
    assert "  Changed Fields:      Status; Urgency" in text


class TestDepartment:
    def test_registered(self, client):
        assert client.form("department") is Department
        assert client.form(DEPARTMENT_FORM) is Department

    def test_read_all_and_details(self, client, fake_session):
        _row(fake_session, DEPARTMENT_FORM, {1000000001: "Example University", 1000000010: "Provost", 200000006: "Physics"})
        _row(fake_session, DEPARTMENT_FORM, {1000000001: "Example University", 1000000010: "Provost", 200000006: "IT Services"})

        depts = Department.read(client, limit="1=1")

        assert [d.department for d in depts] == ["Physics", "IT Services"]
        assert fake_session.calls_named("read")[-1] == ("read", DEPARTMENT_FORM, "1=1")
        assert depts[1].print_text() == (
            "Department information for 'IT Services'\n"
            "  ID:                  000000000000002\n"
            "  Company:             Example University\n"
            "  Organization:        Provost\n"
            "  Department:          IT Services\n"
        )

    def test_read_by_department(self, client, fake_session):
        Department.read(client, department="Physics", company="%")
        assert fake_session.calls_named("read")[-1][2] == "'200000006' = \"Physics\""
