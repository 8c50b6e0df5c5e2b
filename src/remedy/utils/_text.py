# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Fixed-width text helpers for rendering entries."""

from __future__ import annotations

import textwrap
from typing import Any, List, Optional, Sequence, Tuple

from ..models.translator import format_date

DEFAULT_WRAP = 80

__all__ = ["format_text_field", "format_text", "format_date", "format_email"]


def _wrap(text: str, width: int, initial: str, subsequent: str) -> List[str]:
    if not width:
        return [initial + line if i == 0 else subsequent + line for i, line in enumerate(text.splitlines() or [""])]
    out: List[str] = []
    first = True
    for para in text.splitlines() or [""]:
        lines = textwrap.wrap(
            para,
            width=width,
            initial_indent=initial if first else subsequent,
            subsequent_indent=subsequent,
            break_on_hyphens=False,
        )
        out.extend(lines or [(initial if first else subsequent).rstrip()])
        first = False
    return out


def format_text_field(
    pairs: Sequence[Tuple[str, Any]],
    minwidth: int = 0,
    prefix: str = "",
    width: int = DEFAULT_WRAP,
) -> str:
    """
    Aligned ``Label: value`` lines.

    Labels are padded to the longest label (at least ``minwidth``); long values
    wrap under the value column. Missing values print as ``*unknown*``.

    :param pairs: ``(label, value)`` pairs in display order.
    :param minwidth: Minimum label column width.
    :param prefix: Text put before every line.
    :param width: Wrap width, 0 for no wrapping.
    """
    entries = []
    label_width = minwidth
    for label, value in pairs:
        label = f"{label}:"
        text = "*unknown*" if value is None or value == "" else str(value)
        entries.append((label, text))
        label_width = max(label_width, len(label))

    lines: List[str] = []
    for label, text in entries:
        line = f"{label:<{label_width}} {text}"
        lines.extend(_wrap(line, width, prefix, prefix + " " * (label_width + 1)))
    return "\n".join(lines) + "\n"


def format_text(text: Optional[str], prefix: str = "", width: int = DEFAULT_WRAP) -> str:
    """Wrap free text, each line starting with ``prefix``."""
    return "\n".join(_wrap(text or "", width, prefix, prefix)) + "\n"


def format_email(name: Optional[str], email: Optional[str], domain: Optional[str] = None) -> str:
    """
    ``Name <address>``; ``domain`` is appended to addresses without an ``@``.

    Returns just the address when there is no name, or just the name when
    there is no address.
    """
    if email and "@" not in email and domain:
        email = f"{email}@{domain}"
    if name and email:
        return f"{name} <{email}>"
    return email or name or ""
