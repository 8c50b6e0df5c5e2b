# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Shared pytest fixtures and configuration for Remedy client tests.

This module provides common test fixtures, mock objects, and configuration
that can be used across all test modules.
"""

import pytest
from unittest.mock import Mock

from remedy.client import RemedyClient
from remedy.core.config import RemedyConfig
from remedy.data._cache import SchemaCache
from remedy.models.schema import SchemaMetadata
from remedy.models.translator import FieldTranslator

from tests.fixtures.test_data import INCIDENT_FIELDS, INCIDENT_FORM, INCIDENT_PROPERTIES, FakeSession


@pytest.fixture
def test_config():
    """Test configuration with safe defaults."""
    return RemedyConfig(
        remedy_host="remedy.example.edu",
        remedy_user="svc-remedy",
        remedy_pass="secret",
        company="Example University",
        workgroup="ITS Unix Systems",
        domain="example.edu",
        cache_root=None,
        http_retries=0,
        http_backoff=0.1,
        http_timeout=5,
    )


@pytest.fixture
def fake_session():
    """Connected in-memory session over the sample schemas."""
    return FakeSession().connect()


@pytest.fixture
def memory_cache():
    """Schema cache without a disk tier."""
    return SchemaCache(root=None)


@pytest.fixture
def client(test_config, fake_session, memory_cache):
    """Client wired to the in-memory session."""
    return RemedyClient(test_config, session=fake_session, cache=memory_cache)


@pytest.fixture
def incident_schema():
    """Assembled metadata of the sample incident form."""
    return SchemaMetadata.assemble(INCIDENT_FORM, INCIDENT_FIELDS, INCIDENT_PROPERTIES)


@pytest.fixture
def incident_translator(incident_schema):
    return FieldTranslator(incident_schema)


@pytest.fixture
def mock_http_client():
    """Mock HTTP client for unit tests."""
    mock = Mock()
    mock._request.return_value = Mock(status_code=200, text="", headers={})
    return mock
