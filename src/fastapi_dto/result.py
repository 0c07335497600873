from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .exceptions import Issue


@dataclass(frozen=True)
class ParseResult:
    """Outcome of `safe_parse`: either parsed data or the list of issues."""

    success: bool
    data: Any = None
    issues: list[Issue] = field(default_factory=list)
