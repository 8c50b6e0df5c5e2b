# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

import unittest

import pandas as pd

from remedy.models.entry import Entry
from remedy.models.schema import SchemaMetadata
from remedy.models.translator import FieldTranslator
from remedy.utils._pandas import entries_to_dataframe

from tests.fixtures.test_data import WORKLOG_FIELDS, WORKLOG_FORM, WORKLOG_PROPERTIES


class TestEntriesToDataFrame(unittest.TestCase):
    def setUp(self):
        tr = FieldTranslator(SchemaMetadata.assemble(WORKLOG_FORM, WORKLOG_FIELDS, WORKLOG_PROPERTIES))
        self.entries = [
            Entry.from_row(tr, {1000000000: "first", 1000000159: "asmith"}, request_id="000000000000001"),
            Entry.from_row(tr, {1000000000: "second"}, request_id="000000000000002"),
        ]

    def test_rows_indexed_by_request_id(self):
        df = entries_to_dataframe(self.entries)
        self.assertIsInstance(df, pd.DataFrame)
        self.assertEqual(list(df.index), ["000000000000001", "000000000000002"])
        self.assertEqual(df.index.name, "Request ID")
        self.assertEqual(df.loc["000000000000002", "Description"], "second")
        self.assertTrue(pd.isna(df.loc["000000000000002", "Work Log Submitter"]))

    def test_column_selection(self):
        df = entries_to_dataframe(self.entries, columns=["Work Log Submitter", "Description"])
        self.assertEqual(list(df.columns), ["Work Log Submitter", "Description"])

    def test_empty(self):
        df = entries_to_dataframe([])
        self.assertTrue(df.empty)
