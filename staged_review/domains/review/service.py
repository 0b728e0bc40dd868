from __future__ import annotations

import logging
from typing import Dict, List, Protocol

from staged_review.domains.review.chain import ChatCapable, ReviewChain
from staged_review.domains.review.models import ReviewOutcome
from staged_review.shared.errors import ReviewError


logger = logging.getLogger(__name__)


class StagedDiffSource(Protocol):
    def list_staged_files(self) -> List[str]: ...

    def get_staged_diff(self, path: str) -> str: ...


def _wrap(message: str, cause: Exception, *, path: str | None = None) -> ReviewError:
    error = ReviewError(f"{message}: {cause}", path=path)
    error.__cause__ = cause
    return error


class ReviewService:
    """Reviews every staged file in listing order, stopping at the first failure."""

    def __init__(self, *, git_client: StagedDiffSource, llm_client: ChatCapable) -> None:
        self._git_client = git_client
        self._review_chain = ReviewChain(llm_client=llm_client)

    def review_staged_changes(self) -> ReviewOutcome:
        try:
            files = self._git_client.list_staged_files()
        except Exception as exc:  # noqa: BLE001 - collapsed into the outcome
            logger.error("Failed to list staged files: %s", exc)
            return ReviewOutcome.failed(_wrap("failed to list staged files", exc))

        if not files:
            logger.info("No staged files to review")
            return ReviewOutcome(files=[], reviews={})

        reviews: Dict[str, str] = {}
        for index, path in enumerate(files, start=1):
            logger.info("Reviewing %s (%s/%s)", path, index, len(files))

            try:
                diff = self._git_client.get_staged_diff(path)
            except Exception as exc:  # noqa: BLE001 - collapsed into the outcome
                logger.error("Failed to get staged diff for %s: %s", path, exc)
                return ReviewOutcome.failed(
                    _wrap(f"failed to get staged diff for {path}", exc, path=path)
                )

            try:
                reviews[path] = self._review_chain.invoke(diff)
            except Exception as exc:  # noqa: BLE001 - collapsed into the outcome
                logger.error("Failed to review %s: %s", path, exc)
                return ReviewOutcome.failed(_wrap(f"failed to review {path}", exc, path=path))

        logger.info("Reviewed %s staged file(s)", len(files))
        return ReviewOutcome(files=list(files), reviews=reviews)
