from __future__ import annotations

from typing import Protocol

from staged_review.domains.review.prompt import build_review_prompt


class ChatCapable(Protocol):
    def chat(self, prompt: str) -> str: ...


class ReviewChain:
    """Prompt -> LLM pipeline wrapper."""

    def __init__(self, *, llm_client: ChatCapable) -> None:
        self._llm_client = llm_client

    def invoke(self, diff: str) -> str:
        return self._llm_client.chat(build_review_prompt(diff))
