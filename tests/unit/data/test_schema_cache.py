# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

import json
import os
from unittest.mock import patch

import pytest

from remedy.core.config import RemedyConfig
from remedy.data._cache import SchemaCache


KEY = SchemaCache.key("remedy", "remedy.example.edu", "HPD:Help Desk")


def test_key_layout():
    assert KEY == "remedy;remedy.example.edu;HPD:Help Desk"


def test_memory_only_roundtrip():
    cache = SchemaCache(root=None)
    assert cache.get_value(KEY) is None
    assert cache.set_value(KEY, {"a": 1}) is True
    assert cache.get_value(KEY) == {"a": 1}
    assert cache.stats == {"hits": 1, "misses": 1, "sets": 1}


def test_empty_key_rejected():
    cache = SchemaCache(root=None)
    with pytest.raises(ValueError):
        cache.get_value("")
    with pytest.raises(ValueError):
        cache.set_value("", 1)


def test_disabled_cache_never_stores(tmp_path):
    cache = SchemaCache(root=str(tmp_path), enabled=False)
    assert cache.set_value(KEY, 1) is False
    assert cache.get_value(KEY) is None
    assert not os.path.exists(os.path.join(str(tmp_path), "Remedy_Cache"))


def test_disk_tier_shared_between_instances(tmp_path):
    writer = SchemaCache(root=str(tmp_path), namespace="Test_Cache")
    writer.set_value(KEY, {"form_name": "HPD:Help Desk"})

    files = os.listdir(writer.directory)
    assert len(files) == 1 and files[0].endswith(".json")
    with open(os.path.join(writer.directory, files[0]), encoding="utf-8") as fh:
        stored = json.load(fh)
    assert stored["key"] == KEY

    reader = SchemaCache(root=str(tmp_path), namespace="Test_Cache")
    assert reader.get_value(KEY) == {"form_name": "HPD:Help Desk"}


def test_expired_value_is_a_miss_and_removed(tmp_path):
    cache = SchemaCache(root=str(tmp_path), expiration=60)
    with patch("remedy.data._cache.time.time", return_value=1000.0):
        cache.set_value(KEY, "v")
    with patch("remedy.data._cache.time.time", return_value=1061.0):
        assert cache.get_value(KEY) is None
    assert os.listdir(cache.directory) == []


def test_unreadable_file_is_a_miss(tmp_path):
    cache = SchemaCache(root=str(tmp_path))
    cache.set_value(KEY, "v")
    path = cache._path(KEY)
    with open(path, "w", encoding="utf-8") as fh:
        fh.write("{not json")

    fresh = SchemaCache(root=str(tmp_path))
    assert fresh.get_value(KEY) is None
    assert not os.path.exists(path)


def test_delete_and_clear(tmp_path):
    cache = SchemaCache(root=str(tmp_path))
    cache.set_value("a;b;c", 1)
    cache.set_value("a;b;d", 2)

    cache.delete("a;b;c")
    assert cache.get_value("a;b;c") is None
    assert cache.get_value("a;b;d") == 2

    assert cache.clear() == 1
    assert cache.get_value("a;b;d") is None


def test_from_config(tmp_path):
    config = RemedyConfig(cache_root=str(tmp_path), cache_namespace="NS", cache_expiration=5, caching=False)
    cache = SchemaCache.from_config(config)
    assert cache.directory == os.path.join(str(tmp_path), "NS")
    assert cache.expiration == 5
    assert cache.enabled is False
