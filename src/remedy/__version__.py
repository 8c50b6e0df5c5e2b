# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Version information for the remedy package."""

__version__ = "0.1.0"
