# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

# HTTP subcode constants
HTTP_400 = "http_400"
HTTP_401 = "http_401"
HTTP_403 = "http_403"
HTTP_404 = "http_404"
HTTP_500 = "http_500"
HTTP_502 = "http_502"
HTTP_503 = "http_503"

ALL_HTTP_SUBCODES = {
    HTTP_400,
    HTTP_401,
    HTTP_403,
    HTTP_404,
    HTTP_500,
    HTTP_502,
    HTTP_503,
}

# Configuration subcodes
CONFIG_FILE_UNREADABLE = "config_file_unreadable"
CONFIG_FILE_INVALID = "config_file_invalid"

# Session subcodes
SESSION_MISSING_HOST = "session_missing_host"
SESSION_MISSING_USER = "session_missing_user"
SESSION_LOGIN_FAILED = "session_login_failed"
SESSION_UNKNOWN_TYPE = "session_unknown_type"
SESSION_NOT_CONNECTED = "session_not_connected"

# Backend subcodes
BACKEND_REQUEST_FAILED = "backend_request_failed"
BACKEND_BAD_RESPONSE = "backend_bad_response"
RELAY_STDERR = "relay_stderr"
RELAY_EXIT_STATUS = "relay_exit_status"
RELAY_ARGS_TOO_LARGE = "relay_args_too_large"
RELAY_KERBEROS = "relay_kerberos"

# Schema subcodes
SCHEMA_EMPTY_FIELD_TABLE = "schema_empty_field_table"
SCHEMA_UNKNOWN_FIELD = "schema_unknown_field"
SCHEMA_UNKNOWN_FIELD_ID = "schema_unknown_field_id"
SCHEMA_BAD_ENUM_LIMITS = "schema_bad_enum_limits"
SCHEMA_UNKNOWN_FORM = "schema_unknown_form"

# Validation subcodes
VALIDATION_ENUM_UNRESOLVED = "validation_enum_unresolved"
VALIDATION_TIME_UNPARSEABLE = "validation_time_unparseable"
VALIDATION_NOT_UPDATABLE = "validation_not_updatable"
VALIDATION_NO_REQUEST_ID = "validation_no_request_id"

# Multiplicity subcodes
MULTIPLICITY_NONE = "multiplicity_none"
MULTIPLICITY_MANY = "multiplicity_many"


def http_subcode(status: int) -> str:
    """Map an HTTP status to its subcode constant (``http_<status>``)."""
    return f"http_{status}"
