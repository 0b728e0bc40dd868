from __future__ import annotations

import logging
from dataclasses import dataclass
from time import perf_counter
from typing import List

import openai
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI

from staged_review.domains.review.prompt import build_review_messages
from staged_review.shared.errors import LLMInvocationError
from staged_review.shared.types import ChatMessageDict


logger = logging.getLogger(__name__)

DEFAULT_TEMPERATURE = 0.2


@dataclass(frozen=True)
class LLMClientConfig:
    api_key: str
    model: str
    base_url: str = ""
    temperature: float = DEFAULT_TEMPERATURE


class LLMClient:
    """Single-turn client for any OpenAI-compatible chat-completion endpoint."""

    def __init__(self, config: LLMClientConfig) -> None:
        api_key = (config.api_key or "").strip()
        if not api_key:
            raise LLMInvocationError("api_key must not be empty")

        self._api_key = api_key
        self._model = config.model.strip()
        self._base_url = (config.base_url or "").strip()
        self._temperature = config.temperature

    @property
    def model_name(self) -> str:
        return self._model

    @property
    def base_url(self) -> str:
        return self._base_url

    @staticmethod
    def _to_langchain_messages(messages: List[ChatMessageDict]) -> List[BaseMessage]:
        lc_messages: List[BaseMessage] = []
        for message in messages:
            role = message.get("role")
            content = message.get("content", "")

            if role == "system":
                lc_messages.append(SystemMessage(content=content))
            elif role == "user":
                lc_messages.append(HumanMessage(content=content))
            elif role == "assistant":
                lc_messages.append(AIMessage(content=content))
            else:
                logger.warning("Unknown message role '%s', treating as user", role)
                lc_messages.append(HumanMessage(content=content))

        return lc_messages

    def _create_llm(self) -> ChatOpenAI:
        logger.info(
            "Creating LLM: model=%s, base_url=%s",
            self._model,
            self._base_url or "<default>",
        )

        kwargs = {
            "model": self._model,
            "api_key": self._api_key,
            "temperature": self._temperature,
            "max_retries": 0,
            "timeout": None,
        }
        if self._base_url:
            kwargs["base_url"] = self._base_url
        return ChatOpenAI(**kwargs)

    def complete(self, messages: List[ChatMessageDict]) -> str:
        lc_messages = self._to_langchain_messages(messages)
        llm = self._create_llm()

        try:
            started_at = perf_counter()
            response = llm.invoke(lc_messages)
            elapsed = perf_counter() - started_at
        except openai.APIConnectionError as exc:
            raise LLMInvocationError(
                f"could not reach chat endpoint {self._base_url or 'api.openai.com'}: {exc}"
            ) from exc
        except openai.APIStatusError as exc:
            raise LLMInvocationError(
                f"chat endpoint returned HTTP {exc.status_code}: {exc.message}"
            ) from exc
        except Exception as exc:  # noqa: BLE001 - external provider wrapper
            raise LLMInvocationError(f"failed to invoke LLM: {exc}") from exc

        raw_content = response.content
        if isinstance(raw_content, str):
            content = raw_content
        else:
            # content blocks
            content = "".join(
                part.get("text", "") if isinstance(part, dict) else str(part)
                for part in raw_content
            )

        content = content.strip()
        if not content:
            raise LLMInvocationError("LLM returned empty content")

        logger.info("LLM replied in %.2fs (model=%s)", elapsed, self._model)
        return content

    def chat(self, prompt: str) -> str:
        """Sends one user message and returns the reply text."""
        prompt = (prompt or "").strip()
        if not prompt:
            raise LLMInvocationError("prompt must not be empty")
        return self.complete([{"role": "user", "content": prompt}])

    def review(self, diff: str) -> str:
        """Sends the review instructions as a system message and the diff as the user message."""
        if not (diff or "").strip():
            raise LLMInvocationError("diff is empty, nothing to review")
        return self.complete(build_review_messages(diff))
