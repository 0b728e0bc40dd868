from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from staged_review.infra.repositories.config_store import default_config_path


DEFAULT_LOG_LEVEL = "WARNING"


def _clean_optional(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _get_optional_str(name: str) -> str | None:
    return _clean_optional(os.environ.get(name))


@dataclass(frozen=True)
class AppSettings:
    log_level: str
    log_file: str | None
    config_path: Path

    @classmethod
    def from_env(cls) -> "AppSettings":
        config_path = _get_optional_str("STAGED_REVIEW_CONFIG")

        return cls(
            log_level=(_get_optional_str("STAGED_REVIEW_LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper(),
            log_file=_get_optional_str("STAGED_REVIEW_LOG_FILE"),
            config_path=Path(config_path).expanduser() if config_path else default_config_path(),
        )
