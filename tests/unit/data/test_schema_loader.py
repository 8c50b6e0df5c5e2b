# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

import pytest

from remedy.core.errors import BackendError
from remedy.data._cache import SchemaCache
from remedy.data._schema import _SchemaLoader

from tests.fixtures.test_data import INCIDENT_FORM, FakeSession


@pytest.fixture
def session():
    return FakeSession().connect()


def test_miss_fetches_and_stores(session):
    cache = SchemaCache(root=None)
    loader = _SchemaLoader(session, cache)

    meta = loader.load(INCIDENT_FORM)

    assert meta.field_name_to_id["Status"] == 7
    assert len(session.calls_named("get_field_table")) == 1
    assert len(session.calls_named("get_fields_for_schema")) == 1
    assert cache.get_value("remedy;remedy.example.edu;HPD:Help Desk")["form_name"] == INCIDENT_FORM


def test_hit_skips_backend(session):
    cache = SchemaCache(root=None)
    _SchemaLoader(session, cache).load(INCIDENT_FORM)
    session.calls.clear()

    meta = _SchemaLoader(session, cache).load(INCIDENT_FORM)

    assert session.calls == []
    assert meta.field_to_enum_values["Status"][4] == "Resolved"


def test_hit_from_disk_restores_int_enum_codes(session, tmp_path):
    _SchemaLoader(session, SchemaCache(root=str(tmp_path))).load(INCIDENT_FORM)
    session.calls.clear()

    meta = _SchemaLoader(session, SchemaCache(root=str(tmp_path))).load(INCIDENT_FORM)

    assert session.calls == []
    assert meta.field_to_enum_values["Urgency"][2000] == "2-High"


def test_caller_separates_keys(session):
    cache = SchemaCache(root=None)
    _SchemaLoader(session, cache, caller="tool-a").load(INCIDENT_FORM)
    session.calls.clear()

    _SchemaLoader(session, cache, caller="tool-b").load(INCIDENT_FORM)

    assert len(session.calls_named("get_field_table")) == 1


def test_without_cache_always_fetches(session):
    loader = _SchemaLoader(session, None)
    loader.load(INCIDENT_FORM)
    loader.load(INCIDENT_FORM)
    assert len(session.calls_named("get_field_table")) == 2


def test_forget(session):
    cache = SchemaCache(root=None)
    loader = _SchemaLoader(session, cache)
    loader.load(INCIDENT_FORM)
    loader.forget(INCIDENT_FORM)
    assert cache.get_value(loader.cache_key(INCIDENT_FORM)) is None


def test_backend_errors_propagate(session):
    def fail(form):
        raise BackendError("relay down")

    session.get_field_table = fail
    cache = SchemaCache(root=None)
    with pytest.raises(BackendError):
        _SchemaLoader(session, cache).load(INCIDENT_FORM)
    assert cache.stats["sets"] == 0
