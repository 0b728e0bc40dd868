from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

from staged_review.shared.errors import GitCommandError, NotAGitRepositoryError


logger = logging.getLogger(__name__)

DEFAULT_PATHSPECS: Tuple[str, ...] = ("*.go",)
_NOT_A_REPOSITORY = "not a git repository"

# Paths are printed verbatim instead of as quoted octal escapes, so they can be
# passed back to git as pathspecs.
_GIT_OPTIONS: Tuple[str, ...] = ("-c", "core.quotePath=false")


@dataclass(frozen=True)
class GitClientConfig:
    executable: str = "git"
    pathspecs: Tuple[str, ...] = field(default=DEFAULT_PATHSPECS)
    cwd: str | None = None


class GitClient:
    """Reads the staged area of the repository in the working directory."""

    def __init__(self, config: GitClientConfig | None = None) -> None:
        config = config or GitClientConfig()
        self._executable = config.executable
        self._pathspecs = config.pathspecs
        self._cwd = config.cwd

    def _run(self, args: Sequence[str], *, description: str) -> str:
        command = [self._executable, *_GIT_OPTIONS, *args]
        logger.debug("Running %s", " ".join(command))

        try:
            completed = subprocess.run(
                command,
                cwd=self._cwd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                encoding="utf-8",
                errors="replace",
                check=False,
            )
        except FileNotFoundError as exc:
            raise GitCommandError(f"{self._executable} is not installed or not on PATH") from exc

        output = (completed.stdout or "").strip()
        if completed.returncode != 0:
            if _NOT_A_REPOSITORY in output.lower():
                raise NotAGitRepositoryError(f"current directory is not a git repository: {output}")
            if output:
                raise GitCommandError(f"{description} failed: {output}")
            raise GitCommandError(f"{description} failed with exit code {completed.returncode}")

        return output

    def ensure_repository(self) -> None:
        """Raises NotAGitRepositoryError unless the working directory is inside a repository.

        Outside a repository `git diff` falls back to --no-index mode and only
        prints its usage, so the check has to run first.
        """
        self._run(["rev-parse", "--git-dir"], description="git rev-parse --git-dir")

    def list_staged_files(self) -> List[str]:
        """Returns staged paths matching the configured pathspecs, deduplicated in git's order."""
        self.ensure_repository()
        output = self._run(
            ["diff", "--cached", "--name-only", "--", *self._pathspecs],
            description="git diff --cached --name-only",
        )

        files: List[str] = []
        seen: set[str] = set()
        for line in output.splitlines():
            path = line.strip()
            if not path or path in seen:
                continue
            seen.add(path)
            files.append(path)

        logger.info("Found %s staged file(s)", len(files))
        return files

    def get_staged_diff(self, path: str) -> str:
        output = self._run(
            ["diff", "--cached", "--unified=0", "--", path],
            description=f"git diff --cached for {path}",
        )
        if not output:
            raise GitCommandError(f"file {path} has no staged diff output")
        return output
