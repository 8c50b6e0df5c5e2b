# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Internal pandas helpers"""

from __future__ import annotations

from typing import Any, Optional, Sequence

import pandas as pd


def entries_to_dataframe(entries: Sequence[Any], columns: Optional[Sequence[str]] = None) -> pd.DataFrame:
    """Build a DataFrame of human values from entries, indexed by request id.

    :param entries: Entries exposing ``request_id`` and ``to_human_dict()``.
    :param columns: Optional column order; fields outside it are dropped.
    """
    rows = [e.to_human_dict() for e in entries]
    index = [e.request_id for e in entries]
    df = pd.DataFrame(rows, index=pd.Index(index, name="Request ID"), columns=list(columns) if columns else None)
    return df
