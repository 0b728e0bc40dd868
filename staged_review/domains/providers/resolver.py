from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict

from staged_review.domains.providers.models import (
    ProviderProfile,
    ProviderSettings,
    ResolvedProvider,
)
from staged_review.shared.errors import ConfigurationError


logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o-mini"


@dataclass(frozen=True)
class ProviderDefaults:
    base_url: str | None
    model: str


_DEEPSEEK = ProviderDefaults(base_url="https://api.deepseek.com", model="deepseek-coder")
_QWEN = ProviderDefaults(
    base_url="https://dashscope.aliyuncs.com/compatible-mode/v1",
    model="qwen-turbo",
)

# OpenAI-compatible backends with well-known endpoints. A base_url of None
# leaves the client on the official OpenAI endpoint.
KNOWN_PROVIDERS: Dict[str, ProviderDefaults] = {
    "": ProviderDefaults(base_url=None, model=DEFAULT_MODEL),
    "openai": ProviderDefaults(base_url=None, model=DEFAULT_MODEL),
    "deepseek": _DEEPSEEK,
    "qwen": _QWEN,
    "tongyi": _QWEN,
    "ali": _QWEN,
    "aliyun": _QWEN,
    "openrouter": ProviderDefaults(
        base_url="https://openrouter.ai/api/v1",
        model="openai/gpt-4o-mini",
    ),
}


def normalize_provider_name(name: str | None) -> str:
    return (name or "").strip().lower()


def lookup_defaults(name: str | None) -> ProviderDefaults | None:
    return KNOWN_PROVIDERS.get(normalize_provider_name(name))


def resolve_provider(settings: ProviderSettings) -> ResolvedProvider:
    """Fill in base URL and model for the active provider.

    Known providers get their default endpoint and model when those are unset.
    Unknown providers keep the configured base URL as-is and only fall back to
    DEFAULT_MODEL.
    """
    api_key = (settings.api_key or "").strip()
    if not api_key:
        raise ConfigurationError("api_key in the config must not be empty")

    base_url = (settings.base_url or "").strip()
    model = (settings.model or "").strip()

    defaults = lookup_defaults(settings.name)
    if defaults is not None:
        if not base_url and defaults.base_url:
            base_url = defaults.base_url
        if not model:
            model = defaults.model
    elif not model:
        model = DEFAULT_MODEL

    logger.debug(
        "Resolved provider '%s': base_url=%s, model=%s",
        settings.name,
        base_url or "<default>",
        model,
    )
    return ResolvedProvider(base_url=base_url, api_key=api_key, model=model)


def apply_profile_defaults(name: str, profile: ProviderProfile) -> None:
    """Seed a freshly keyed profile with the defaults of a known provider.

    Only applies while the profile has no base_url yet; an existing model is
    never overwritten.
    """
    if profile.base_url is not None:
        return

    defaults = lookup_defaults(name)
    if defaults is None or not normalize_provider_name(name):
        return

    if defaults.base_url:
        profile.base_url = defaults.base_url
    if profile.model is None:
        profile.model = defaults.model
