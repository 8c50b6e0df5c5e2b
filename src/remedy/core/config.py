# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Configuration settings for Remedy client operations.

Site settings live in a Python script (``/etc/remedy/config`` unless
``$REMEDY_CONFIG`` or an explicit path says otherwise). The script is
evaluated once and its upper-case globals override the defaults below::

    REMEDY_HOST = "remedy.example.edu"
    REMEDY_USER = "svc-remedy"
    REMEDY_PASS = "..."
    COMPANY = "Example University"
    SUB_ORG = "IT Services"
    WORKGROUP = "ITS Unix Systems"
    LOGFILE = "/var/log/remedy.log"
"""

from __future__ import annotations

import dataclasses
import getpass
import logging
import os
import runpy
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from ._error_codes import CONFIG_FILE_INVALID, CONFIG_FILE_UNREADABLE
from .errors import ConfigError

DEFAULT_CONFIG_FILE = "/etc/remedy/config"
CONFIG_ENV_VAR = "REMEDY_CONFIG"

# Seven days, in seconds
DEFAULT_CACHE_EXPIRATION = 7 * 24 * 60 * 60

# Upper-case script variable -> config attribute. Names without an entry map
# to their lower-cased form.
_SCRIPT_ALIASES = {
    "SEARCH_COUNT": "count",
    "TEXT_WRAP": "wrap",
}

# Environment variable -> config attribute
_ENV_VARS = {
    "REMEDY_HOST": "remedy_host",
    "REMEDY_PORT": "remedy_port",
    "REMEDY_USER": "remedy_user",
    "REMEDY_PASS": "remedy_pass",
    "REMEDY_URL": "remedy_url",
    "REMEDY_SESSION_TYPE": "session_type",
    "REMEDY_REMCTL_HOST": "remctl_host",
    "REMEDY_REMCTL_PORT": "remctl_port",
    "REMEDY_REMCTL_PRINCIPAL": "remctl_principal",
    "REMEDY_REMCTL_KEYTAB": "remctl_keytab",
    "REMEDY_COMPANY": "company",
    "REMEDY_SUB_ORG": "sub_org",
    "REMEDY_WORKGROUP": "workgroup",
    "REMEDY_USERNAME": "username",
    "REMEDY_DOMAIN": "domain",
    "REMEDY_DEBUG_LEVEL": "debug_level",
    "REMEDY_LOGFILE": "logfile",
    "REMEDY_LOGFILE_LEVEL": "logfile_level",
    "REMEDY_CACHE_ROOT": "cache_root",
    "REMEDY_CACHE_EXPIRATION": "cache_expiration",
    "REMEDY_CACHING": "caching",
}


@dataclass(frozen=True)
class RemedyConfig:
    """
    Configuration settings for Remedy client operations.

    :param remedy_host: Remedy (AR System) server host name.
    :type remedy_host: str or None
    :param remedy_port: Server port. Defaults to 443 for the REST transport.
    :type remedy_port: int or None
    :param remedy_user: Login user for the server.
    :type remedy_user: str or None
    :param remedy_pass: Password for ``remedy_user``.
    :type remedy_pass: str or None
    :param remedy_url: Full base URL of the REST API; overrides host and port.
    :type remedy_url: str or None
    :param session_type: ``"ars"`` to talk to the server directly, ``"remctl"`` to relay
        every call through a remctl gateway.
    :type session_type: str
    :param company: Default ``Assigned Support Company`` for incident searches.
    :type company: str or None
    :param sub_org: Default ``Assigned Support Organization``.
    :type sub_org: str or None
    :param workgroup: Default ``Assigned Group``.
    :type workgroup: str or None
    :param username: Acting user, used as the default assignee in searches.
    :type username: str or None
    :param domain: Appended to bare user names to make e-mail addresses.
    :type domain: str or None
    :param count: Default maximum number of entries per search (default: 50).
    :type count: int
    :param wrap: Text wrap width for rendered output, 0 for no wrapping (default: 80).
    :type wrap: int
    :param debug_level: Level of the stderr log handler (default: ``"ERROR"``).
    :type debug_level: str
    :param logfile: Optional log file path.
    :type logfile: str or None
    :param logfile_level: Level of the file log handler (default: ``"INFO"``).
    :type logfile_level: str
    :param cache_root: Directory holding the schema cache namespace directories.
    :type cache_root: str
    :param cache_namespace: Cache namespace (default: ``"Remedy_Cache"``).
    :type cache_namespace: str
    :param cache_expiration: Schema cache lifetime in seconds (default: 7 days).
    :type cache_expiration: int
    :param caching: Whether the schema cache is consulted at all.
    :type caching: bool
    """

    # Server
    remedy_host: Optional[str] = None
    remedy_port: Optional[int] = None
    remedy_user: Optional[str] = None
    remedy_pass: Optional[str] = field(default=None, repr=False)
    remedy_url: Optional[str] = None

    # Transport
    session_type: str = "ars"
    remctl_host: Optional[str] = None
    remctl_port: Optional[int] = None
    remctl_principal: Optional[str] = None
    remctl_service: str = "remedy-gateway"
    remctl_keytab: Optional[str] = None
    remctl_ticket_file: Optional[str] = None

    # Organizational defaults
    company: Optional[str] = None
    sub_org: Optional[str] = None
    workgroup: Optional[str] = None
    username: Optional[str] = None
    domain: Optional[str] = None

    # Presentation
    count: int = 50
    wrap: int = 80

    # Logging
    debug_level: str = "ERROR"
    logfile: Optional[str] = None
    logfile_level: str = "INFO"

    # Schema cache
    cache_root: str = "/tmp"
    cache_namespace: str = "Remedy_Cache"
    cache_expiration: int = DEFAULT_CACHE_EXPIRATION
    caching: bool = True

    # HTTP; no retries unless asked for
    http_retries: Optional[int] = None
    http_backoff: Optional[float] = None
    http_timeout: Optional[float] = None

    # Path of the script this configuration was loaded from
    config_file: Optional[str] = None

    @property
    def server_url(self) -> str:
        """
        Base URL of the AR System REST API.

        :return: ``remedy_url`` when set, otherwise ``https://<host>[:<port>]``.
        :rtype: str
        :raises ConfigError: If neither ``remedy_url`` nor ``remedy_host`` is set.
        """
        if self.remedy_url:
            return self.remedy_url.rstrip("/")
        if not self.remedy_host:
            raise ConfigError("remedy_host is not set")
        if self.remedy_port:
            return f"https://{self.remedy_host}:{self.remedy_port}"
        return f"https://{self.remedy_host}"

    @property
    def acting_user(self) -> Optional[str]:
        """The configured username, else the login name of the current process."""
        if self.username:
            return self.username
        try:
            return getpass.getuser()
        except (KeyError, OSError):
            return None

    def replace(self, **changes: Any) -> "RemedyConfig":
        """Return a copy with ``changes`` applied."""
        return dataclasses.replace(self, **changes)

    @classmethod
    def from_env(cls) -> "RemedyConfig":
        """
        Create a configuration from defaults overridden by ``REMEDY_*`` environment variables.

        :return: Configuration instance.
        :rtype: ~remedy.core.config.RemedyConfig
        """
        values: Dict[str, Any] = {}
        for var, attr in _ENV_VARS.items():
            raw = os.environ.get(var)
            if raw is not None and raw != "":
                values[attr] = raw
        return cls(**_coerce(values))

    @classmethod
    def load(cls, path: Optional[str] = None) -> "RemedyConfig":
        """
        Load configuration from a Python settings script.

        The file is chosen in order of preference: ``path``, the ``REMEDY_CONFIG``
        environment variable, then ``/etc/remedy/config``. Upper-case globals in
        the script (``REMEDY_HOST``, ``COMPANY``, ``SEARCH_COUNT``, ...) override
        the defaults; anything else is ignored.

        :param path: Optional explicit path to the settings script.
        :type path: str or None
        :return: Configuration instance.
        :rtype: ~remedy.core.config.RemedyConfig
        :raises ConfigError: If the file cannot be read or fails to evaluate.
        """
        path = path or os.environ.get(CONFIG_ENV_VAR) or DEFAULT_CONFIG_FILE
        if not os.path.isfile(path):
            raise ConfigError(
                f"Couldn't load '{path}': no such file",
                subcode=CONFIG_FILE_UNREADABLE,
                details={"path": path},
            )
        try:
            namespace = runpy.run_path(path)
        except Exception as exc:
            raise ConfigError(
                f"Couldn't load '{path}': {exc}",
                subcode=CONFIG_FILE_INVALID,
                details={"path": path},
            ) from exc
        return cls.from_mapping(namespace, config_file=path)

    @classmethod
    def from_mapping(cls, namespace: Dict[str, Any], config_file: Optional[str] = None) -> "RemedyConfig":
        """
        Build a configuration from a mapping of upper-case setting names.

        :param namespace: Mapping such as the globals of a settings script.
        :type namespace: dict
        :param config_file: Optional path recorded on the result.
        :type config_file: str or None
        :return: Configuration instance.
        :rtype: ~remedy.core.config.RemedyConfig
        """
        known = {f.name for f in dataclasses.fields(cls)}
        values: Dict[str, Any] = {}
        for name, value in namespace.items():
            if not name.isupper() or name.startswith("_"):
                continue
            attr = _SCRIPT_ALIASES.get(name, name.lower())
            if attr in known and value is not None:
                values[attr] = value
        if config_file is not None:
            values["config_file"] = config_file
        return cls(**_coerce(values))


def _coerce(values: Dict[str, Any]) -> Dict[str, Any]:
    """Normalize string settings from files or the environment to attribute types."""
    out = dict(values)
    for key in ("remedy_port", "remctl_port", "count", "wrap", "cache_expiration", "http_retries"):
        if key in out and isinstance(out[key], str):
            try:
                out[key] = int(out[key])
            except ValueError as exc:
                raise ConfigError(f"{key} must be an integer, got {out[key]!r}", subcode=CONFIG_FILE_INVALID) from exc
    for key in ("http_backoff", "http_timeout"):
        if key in out and isinstance(out[key], str):
            out[key] = float(out[key])
    if "caching" in out and isinstance(out["caching"], str):
        out["caching"] = out["caching"].strip().lower() not in ("0", "false", "no", "off", "")
    for key in ("debug_level", "logfile_level"):
        if key in out and isinstance(out[key], int):
            out[key] = logging.getLevelName(out[key])
    return out
