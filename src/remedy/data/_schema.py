# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Load form schema metadata through the schema cache."""

from __future__ import annotations

import logging
from typing import Optional

from ..models.schema import SchemaMetadata
from ._cache import SchemaCache
from ._session import _Session

logger = logging.getLogger(__name__)

DEFAULT_CALLER = "remedy"


class _SchemaLoader:
    """
    Return :class:`~remedy.models.schema.SchemaMetadata` for a form.

    On a cache hit the stored metadata is deserialized. On a miss the field
    table and the field properties are fetched from the session, assembled,
    and stored under ``caller;server;form``. Backend errors propagate.

    :param session: Connected session.
    :param cache: Schema cache, or None to always ask the server.
    :param caller: First component of the cache key; distinguishes tools that
        share a cache directory.
    """

    def __init__(self, session: _Session, cache: Optional[SchemaCache] = None, caller: str = DEFAULT_CALLER) -> None:
        self.session = session
        self.cache = cache
        self.caller = caller

    def cache_key(self, form: str) -> str:
        return SchemaCache.key(self.caller, self.session.server, form)

    def load(self, form: str) -> SchemaMetadata:
        key = self.cache_key(form)
        if self.cache is not None:
            stored = self.cache.get_value(key)
            if stored is not None:
                return SchemaMetadata.from_dict(stored)
            logger.debug("info about %s not found in cache", form)

        logger.debug("populating %s from session", form)
        table = self.session.get_field_table(form)
        props = self.session.get_fields_for_schema(form)
        meta = SchemaMetadata.assemble(form, table, props)

        if self.cache is not None:
            self.cache.set_value(key, meta.to_dict())
        return meta

    def forget(self, form: str) -> None:
        if self.cache is not None:
            self.cache.delete(self.cache_key(form))
