# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Object layer over BMC Remedy Action Request System (ARS).

Scripts read and write Remedy forms (incidents, worklogs, people, support
groups and their associations) through Python objects instead of raw backend
calls. Field schemas are cached per form and used to translate between
human field names and values and the numeric field ids and stored values the
server works with.
"""

from .__version__ import __version__
from .client import RemedyClient
from .core.config import RemedyConfig

__all__ = ["RemedyClient", "RemedyConfig", "__version__"]
