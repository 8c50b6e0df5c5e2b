# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

import logging

import pytest

from remedy.core.errors import SchemaError
from remedy.models.qualifier import (
    FALSE_ENUM,
    FALSE_TIME,
    QualifierBuilder,
    QualifierClause,
    join_and,
    join_or,
    split_modifier,
)


@pytest.fixture
def builder(incident_translator):
    return QualifierBuilder(incident_translator)


@pytest.mark.parametrize(
    "value,expected",
    [("-Resolved", ("-", "Resolved")), ("+=4", ("+=", "4")), ("-=x", ("-=", "x")), ("Resolved", ("", "Resolved"))],
)
def test_split_modifier(value, expected):
    assert split_modifier(value) == expected


class TestClause:
    def test_text_equality(self, builder):
        assert builder.clause("Assigned Group", "ITS Unix Systems") == "'1000000217' = \"ITS Unix Systems\""

    def test_text_quotes_are_escaped(self, builder):
        assert builder.clause("Description", 'say "hi"') == "'8' = \"say \\\"hi\\\"\""

    def test_wildcard_drops_constraint(self, builder):
        assert builder.clause("Assigned Group", "%") is None

    def test_none_is_null_test(self, builder):
        assert builder.clause("Assignee Login ID", None) == "'4' = $NULL$"

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("Resolved", "'7' = 4"),
            ("-Resolved", "'7' < 4"),
            ("+Resolved", "'7' > 4"),
            ("-=Resolved", "'7' <= 4"),
            ("+=Resolved", "'7' >= 4"),
            ("+=4", "'7' >= 4"),
            (2, "'7' = 2"),
        ],
    )
    def test_enum_modifiers(self, builder, value, expected):
        assert builder.clause("Status", value) == expected

    def test_time_modifiers(self, builder):
        assert builder.clause("Submit Date", "-1700000000") == "'3' < 1700000000"
        assert builder.clause("Submit Date", 1700000000) == "'3' = 1700000000"

    def test_unknown_field(self, builder):
        with pytest.raises(SchemaError):
            builder.clause("Colour", "blue")


class TestBuild:
    def test_joins_with_and(self, builder):
        q = builder.build({"Status": "-Resolved", "Assigned Group": "ITS Unix Systems", "Assignee Login ID": "%"})
        assert q == "'7' < 4 AND '1000000217' = \"ITS Unix Systems\""
        assert isinstance(q, QualifierClause)

    def test_empty_when_nothing_constrains(self, builder):
        assert builder.build({"Assigned Group": "%"}) == ""

    def test_extra_clauses_appended(self, builder):
        q = builder.build({"Status": "New"}, extra=["'1' = \"5\""])
        assert q == "'7' = 0 AND '1' = \"5\""

    def test_unresolved_enum_makes_whole_qualifier_false(self, builder, caplog):
        with caplog.at_level(logging.WARNING, logger="remedy.models.qualifier"):
            q = builder.build({"Assigned Group": "x", "Status": "Sleeping"})
        assert q == FALSE_ENUM
        assert q.always_false
        assert "always false" in caplog.text

    def test_enum_label_case_must_match(self, builder):
        assert builder.build({"Status": "resolved"}) == FALSE_ENUM
        assert builder.build({"Status": "+=resolved"}) == FALSE_ENUM

    def test_bad_time_makes_whole_qualifier_false(self, builder):
        assert builder.build({"Submit Date": "-whenever", "Status": "New"}) == FALSE_TIME


class TestAnyOf:
    def test_or_group(self, builder):
        q = builder.any_of("Assigned Group", ["A", "B"])
        assert q == "('1000000217' = \"A\" OR '1000000217' = \"B\")"

    def test_single_value_has_no_parentheses(self, builder):
        assert builder.any_of("Assigned Group", ["A"]) == "'1000000217' = \"A\""

    def test_unresolved_values_left_out(self, builder):
        assert builder.any_of("Status", ["Nope", "New"]) == "'7' = 0"
        assert builder.any_of("Status", ["Nope"]) == FALSE_ENUM


def test_join_helpers():
    assert join_and(["a", None, "", "b"]) == "a AND b"
    assert join_or([]) == ""
