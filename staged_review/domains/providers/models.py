from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping

from staged_review.shared.errors import ConfigurationError
from staged_review.shared.types import ProviderProfileDict


_PROFILE_KEYS = ("api_key", "base_url", "model")
_DOCUMENT_KEYS = ("provider", "providers", "api_key", "base_url", "model")


def _clean_optional(value: Any) -> str | None:
    if value is None:
        return None
    return str(value).strip()


@dataclass
class ProviderProfile:
    """One entry under `providers` in the config file.

    `None` means the key is absent from the YAML document, which is different
    from an explicitly empty string.
    """

    api_key: str | None = None
    base_url: str | None = None
    model: str | None = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, name: str, raw: Any) -> "ProviderProfile":
        if raw is None:
            return cls()
        if not isinstance(raw, Mapping):
            raise ConfigurationError(f"provider {name!r} must be a mapping, got {type(raw).__name__}")

        return cls(
            api_key=_clean_optional(raw.get("api_key")),
            base_url=_clean_optional(raw.get("base_url")),
            model=_clean_optional(raw.get("model")),
            extra={key: value for key, value in raw.items() if key not in _PROFILE_KEYS},
        )

    def to_mapping(self) -> Dict[str, Any]:
        known: ProviderProfileDict = {}
        if self.api_key is not None:
            known["api_key"] = self.api_key
        if self.base_url is not None:
            known["base_url"] = self.base_url
        if self.model is not None:
            known["model"] = self.model
        return {**known, **self.extra}


@dataclass
class ConfigDocument:
    """Typed view of the whole YAML config file.

    Two shapes are supported: a flat single provider (`api_key`, `base_url`,
    `model` at the top level) and a named map under `providers` with the
    default selected by `provider`. Unknown keys are kept in `extra` so a
    rewrite does not drop them.
    """

    provider: str | None = None
    providers: Dict[str, ProviderProfile] = field(default_factory=dict)
    api_key: str | None = None
    base_url: str | None = None
    model: str | None = None
    extra: Dict[str, Any] = field(default_factory=dict)
    has_providers_section: bool = False

    @classmethod
    def from_mapping(cls, raw: Any) -> "ConfigDocument":
        if raw is None:
            return cls()
        if not isinstance(raw, Mapping):
            raise ConfigurationError(
                f"config root must be a mapping, got {type(raw).__name__}"
            )

        raw_providers = raw.get("providers")
        if raw_providers is not None and not isinstance(raw_providers, Mapping):
            raise ConfigurationError(
                f"'providers' must be a mapping, got {type(raw_providers).__name__}"
            )

        providers = {
            str(name): ProviderProfile.from_mapping(str(name), entry)
            for name, entry in (raw_providers or {}).items()
        }

        return cls(
            provider=_clean_optional(raw.get("provider")),
            providers=providers,
            api_key=_clean_optional(raw.get("api_key")),
            base_url=_clean_optional(raw.get("base_url")),
            model=_clean_optional(raw.get("model")),
            extra={key: value for key, value in raw.items() if key not in _DOCUMENT_KEYS},
            has_providers_section=isinstance(raw_providers, Mapping),
        )

    def to_mapping(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        if self.provider is not None:
            data["provider"] = self.provider
        if self.providers or self.has_providers_section:
            data["providers"] = {
                name: profile.to_mapping() for name, profile in self.providers.items()
            }
        if self.api_key is not None:
            data["api_key"] = self.api_key
        if self.base_url is not None:
            data["base_url"] = self.base_url
        if self.model is not None:
            data["model"] = self.model
        data.update(self.extra)
        return data

    def ensure_provider(self, name: str) -> ProviderProfile:
        profile = self.providers.get(name)
        if profile is None:
            profile = ProviderProfile()
            self.providers[name] = profile
            self.has_providers_section = True
        return profile


@dataclass(frozen=True)
class ProviderSettings:
    """The active provider after the config file has been validated."""

    name: str
    api_key: str
    base_url: str
    model: str


@dataclass(frozen=True)
class ResolvedProvider:
    base_url: str
    api_key: str
    model: str
