from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List


@dataclass(frozen=True)
class ReviewOutcome:
    """Result of one review run: either an error or the files with their reviews."""

    files: List[str] = field(default_factory=list)
    reviews: Dict[str, str] = field(default_factory=dict)
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failed(cls, error: BaseException) -> "ReviewOutcome":
        return cls(files=[], reviews={}, error=error)
