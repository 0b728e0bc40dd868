from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

import yaml

from staged_review.domains.providers.models import ConfigDocument, ProviderSettings
from staged_review.domains.providers.resolver import apply_profile_defaults
from staged_review.shared.errors import ConfigurationError


logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = ".staged-review.yaml"


def default_config_path() -> Path:
    return Path.home() / CONFIG_FILE_NAME


class ConfigStore:
    """Reads and rewrites the per-user YAML config file."""

    def __init__(self, path: str | os.PathLike[str] | None = None) -> None:
        self._path = Path(path) if path is not None else default_config_path()

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.is_file()

    def read_document(self) -> ConfigDocument:
        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise ConfigurationError(f"config file {self._path} does not exist") from exc
        except OSError as exc:
            raise ConfigurationError(f"failed to read config file {self._path}: {exc}") from exc

        try:
            raw = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"failed to parse config file {self._path}: {exc}") from exc

        try:
            return ConfigDocument.from_mapping(raw)
        except ConfigurationError as exc:
            raise ConfigurationError(f"invalid config file {self._path}: {exc}") from exc

    def load(self) -> ProviderSettings:
        document = self.read_document()

        if document.providers:
            name = document.provider or ""
            if not name:
                raise ConfigurationError(f"provider is empty in {self._path}")

            profile = document.providers.get(name)
            if profile is None:
                raise ConfigurationError(
                    f"provider {name!r} not found under providers in {self._path}"
                )
            if not profile.api_key:
                raise ConfigurationError(
                    f"api_key for provider {name!r} is empty in {self._path}"
                )

            logger.info("Loaded provider '%s' from %s", name, self._path)
            return ProviderSettings(
                name=name,
                api_key=profile.api_key,
                base_url=profile.base_url or "",
                model=profile.model or "",
            )

        if not document.api_key:
            raise ConfigurationError(f"api_key is empty in {self._path}")

        logger.info("Loaded single-provider config from %s", self._path)
        return ProviderSettings(
            name=document.provider or "",
            api_key=document.api_key,
            base_url=document.base_url or "",
            model=document.model or "",
        )

    def save(self, document: ConfigDocument) -> None:
        data = yaml.safe_dump(
            document.to_mapping(),
            allow_unicode=True,
            default_flow_style=False,
            sort_keys=False,
        )

        directory = self._path.parent
        directory.mkdir(parents=True, exist_ok=True)

        # mkstemp creates the file with mode 0600
        fd, tmp_name = tempfile.mkstemp(prefix=f".{self._path.name}.", dir=directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(data)
            os.chmod(tmp_name, 0o600)
            os.replace(tmp_name, self._path)
        except OSError as exc:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise ConfigurationError(f"failed to write config file {self._path}: {exc}") from exc

        logger.info("Wrote config file %s", self._path)

    def set_api_key(self, api_key: str, *, provider: str | None = None) -> ConfigDocument:
        document = self.read_document() if self.exists() else ConfigDocument()

        if provider:
            profile = document.ensure_provider(provider)
            profile.api_key = api_key
            apply_profile_defaults(provider, profile)
            if not document.provider:
                document.provider = provider
        else:
            document.api_key = api_key

        self.save(document)
        return document

    def set_default_provider(self, provider: str) -> ConfigDocument:
        if not self.exists():
            raise ConfigurationError(
                f"config file {self._path} does not exist; "
                "run 'config set-key' to add an API key first"
            )

        document = self.read_document()
        if not document.has_providers_section or not document.providers:
            raise ConfigurationError(
                "no providers are configured; "
                f"run 'config set-key --provider {provider}' first"
            )
        if provider not in document.providers:
            raise ConfigurationError(
                f"provider {provider!r} is not configured; "
                f"run 'config set-key --provider {provider}' first"
            )

        document.provider = provider
        self.save(document)
        return document
