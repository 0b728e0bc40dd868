from __future__ import annotations


class ConfigurationError(ValueError):
    """Raised when the config file or the selected provider is missing or invalid."""


class GitCommandError(RuntimeError):
    """Raised when a git command cannot be run or exits with an error."""


class NotAGitRepositoryError(GitCommandError):
    """Raised when git reports that the working directory is not a repository."""


class LLMInvocationError(RuntimeError):
    """Raised when LLM invocation fails or returns malformed output."""


class ReviewError(RuntimeError):
    """Raised when reviewing a single staged file fails."""

    def __init__(self, message: str, *, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path
