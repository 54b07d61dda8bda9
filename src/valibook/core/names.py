"""Column name normalization."""

from __future__ import annotations

import re

_NON_ALNUM = re.compile(r"[^a-z0-9]")


def normalize_name(name: object) -> str:
    """Lowercase a column name and strip everything outside ``[a-z0-9]``.

    Example:
        >>> normalize_name("Account_Num ")
        'accountnum'
    """
    if name is None:
        return ""
    return _NON_ALNUM.sub("", str(name).lower())
