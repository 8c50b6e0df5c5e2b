# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Internal helpers: text formatting and pandas conversion."""

__all__ = []
