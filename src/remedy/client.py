# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

from __future__ import annotations

import logging
from typing import Any, List, Optional, Type

import requests

from .core.config import RemedyConfig
from .data._cache import SchemaCache
from .data._schema import DEFAULT_CALLER, _SchemaLoader
from .data._session import _Session, make_session
from .operations.query import QueryOperations
from .operations.records import RecordOperations
from .operations.schema import SchemaOperations

logger = logging.getLogger(__name__)


class RemedyClient:
    """
    High-level client for BMC Remedy Action Request System forms.

    The client owns one backend session (direct REST or remctl relay, chosen by
    :attr:`~remedy.core.config.RemedyConfig.session_type`) and a schema cache.
    Field schemas are loaded once per form and used to translate between human
    field names and values and the ids and stored values the server uses.

    **Context Manager Support (Recommended)**:
        Using the client as a context manager connects on entry and logs off
        on exit::

            with RemedyClient(RemedyConfig.load()) as client:
                inc = client.read("incident", incnum="INC000000012345")
            # Session closed

    **Without Context Manager**:
        The session is created and connected lazily on first use. Call
        ``close()`` when done::

            client = RemedyClient(config)
            try:
                entries = client.query.where("HPD:Help Desk", {"Status": "Assigned"})
            finally:
                client.close()

    Namespaces:

    - ``client.records``: entry CRUD (new, create, update, save, get, read_where, read_one, delete)
    - ``client.query``: constraint-based queries and DataFrame export
    - ``client.schema``: form schema metadata, translators and cache maintenance

    :param config: Client configuration. Defaults to :meth:`RemedyConfig.from_env`.
    :type config: ~remedy.core.config.RemedyConfig or None
    :param session: Optional pre-built session; the client then does not own it.
    :type session: ~remedy.data._session._Session or None
    :param cache: Optional schema cache. Defaults to one built from ``config``.
    :type cache: ~remedy.data._cache.SchemaCache or None
    :param caller: First component of schema cache keys.
    :type caller: str
    """

    def __init__(
        self,
        config: Optional[RemedyConfig] = None,
        session: Optional[_Session] = None,
        cache: Optional[SchemaCache] = None,
        caller: str = DEFAULT_CALLER,
    ) -> None:
        self._config = config or RemedyConfig.from_env()
        self._session: Optional[_Session] = session
        self._owns_session = session is None
        self._cache = cache if cache is not None else SchemaCache.from_config(self._config)
        self._caller = caller
        self._loader: Optional[_SchemaLoader] = None
        self._http_session: Optional[requests.Session] = None

        # Initialize operation namespaces
        self.records = RecordOperations(self)
        self.query = QueryOperations(self)
        self.schema = SchemaOperations(self)

    @property
    def config(self) -> RemedyConfig:
        return self._config

    def __enter__(self) -> "RemedyClient":
        """
        Enter the context manager: create a pooled HTTP session and connect.

        :return: The client instance.
        :rtype: RemedyClient
        """
        if self._session is None and self._http_session is None:
            self._http_session = requests.Session()
        self._get_session()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        """
        Log off and release resources.

        A session passed in by the caller is left connected. Safe to call
        multiple times.
        """
        if self._session is not None and self._owns_session:
            self._session.disconnect()
            self._session = None
            self._loader = None
        if self._http_session is not None:
            self._http_session.close()
            self._http_session = None

    def _get_session(self) -> _Session:
        """
        Get, creating and connecting if needed, the backend session.

        :raises SessionError: If settings are missing or the login fails.
        """
        if self._session is None:
            self._session = make_session(self._config, http_session=self._http_session)
            self._owns_session = True
        if not self._session.connected:
            self._session.connect()
            logger.debug("connected to %s", self._session.server)
        return self._session

    def _get_loader(self) -> _SchemaLoader:
        if self._loader is None:
            self._loader = _SchemaLoader(self._get_session(), self._cache, self._caller)
        return self._loader

    # ---------------------------------------------------------------- forms

    def form(self, name: str) -> Type[Any]:
        """
        Registered form entity class by short name (``"incident"``, ``"worklog"``, ...) or form name.

        :raises SchemaError: If no entity class is registered under ``name``.
        """
        from .forms.base import registered_form

        return registered_form(name)

    def registered_forms(self) -> List[str]:
        """Short names of every registered form entity class."""
        from .forms.base import registered

        return registered()

    def read(self, name: str, **args: Any) -> List[Any]:
        """Read entities of the form registered as ``name``; see :meth:`~remedy.forms.base.Form.read`."""
        return self.form(name).read(self, **args)

    def create(self, name: str, **values: Any) -> Any:
        """New, unsaved entity of the form registered as ``name``."""
        return self.form(name).create(self, **values)
