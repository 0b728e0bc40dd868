import shutil
import subprocess
from pathlib import Path
from typing import List

import pytest

from staged_review.infra.clients import git as git_module
from staged_review.infra.clients.git import GitClient, GitClientConfig
from staged_review.shared.errors import GitCommandError, NotAGitRepositoryError


_GIT = ["git", "-c", "core.quotePath=false"]
_REPO_OK = (0, ".git\n")


class _FakeRun:
    def __init__(self, outputs: List[tuple[int, str]]) -> None:
        self._outputs = list(outputs)
        self.calls: List[dict] = []

    def __call__(self, command, **kwargs):
        self.calls.append({"command": list(command), **kwargs})
        returncode, stdout = self._outputs.pop(0)
        return subprocess.CompletedProcess(command, returncode, stdout=stdout)


def test_list_staged_files_runs_expected_commands(monkeypatch) -> None:
    fake = _FakeRun([_REPO_OK, (0, "main.go\npkg/util.go\n")])
    monkeypatch.setattr(git_module.subprocess, "run", fake)

    files = GitClient().list_staged_files()

    assert files == ["main.go", "pkg/util.go"]
    assert fake.calls[0]["command"] == [*_GIT, "rev-parse", "--git-dir"]
    call = fake.calls[1]
    assert call["command"] == [*_GIT, "diff", "--cached", "--name-only", "--", "*.go"]
    assert call["stderr"] is subprocess.STDOUT
    assert call["encoding"] == "utf-8"
    assert call["errors"] == "replace"
    assert call["check"] is False


def test_list_staged_files_deduplicates_and_skips_blank_lines(monkeypatch) -> None:
    fake = _FakeRun([_REPO_OK, (0, "b.go\n\na.go\nb.go\n  \na.go\n")])
    monkeypatch.setattr(git_module.subprocess, "run", fake)

    assert GitClient().list_staged_files() == ["b.go", "a.go"]


def test_list_staged_files_empty_output(monkeypatch) -> None:
    monkeypatch.setattr(git_module.subprocess, "run", _FakeRun([_REPO_OK, (0, "")]))

    assert GitClient().list_staged_files() == []


def test_custom_pathspecs_and_cwd(monkeypatch, tmp_path: Path) -> None:
    fake = _FakeRun([_REPO_OK, (0, "app.py\n")])
    monkeypatch.setattr(git_module.subprocess, "run", fake)

    client = GitClient(GitClientConfig(pathspecs=("*.py", "*.pyi"), cwd=str(tmp_path)))
    client.list_staged_files()

    assert fake.calls[1]["command"][-2:] == ["*.py", "*.pyi"]
    assert all(call["cwd"] == str(tmp_path) for call in fake.calls)


def test_not_a_git_repository(monkeypatch) -> None:
    output = "fatal: not a git repository (or any of the parent directories): .git\n"
    fake = _FakeRun([(128, output)])
    monkeypatch.setattr(git_module.subprocess, "run", fake)

    with pytest.raises(NotAGitRepositoryError, match="not a git repository"):
        GitClient().list_staged_files()

    assert len(fake.calls) == 1


def test_command_failure_includes_output(monkeypatch) -> None:
    monkeypatch.setattr(git_module.subprocess, "run", _FakeRun([_REPO_OK, (1, "error: boom\n")]))

    with pytest.raises(GitCommandError, match="error: boom"):
        GitClient().list_staged_files()


def test_command_failure_without_output(monkeypatch) -> None:
    monkeypatch.setattr(git_module.subprocess, "run", _FakeRun([(2, "")]))

    with pytest.raises(GitCommandError, match="exit code 2"):
        GitClient().get_staged_diff("main.go")


def test_missing_git_binary(monkeypatch) -> None:
    def _raise(*args, **kwargs):
        raise FileNotFoundError("git")

    monkeypatch.setattr(git_module.subprocess, "run", _raise)

    with pytest.raises(GitCommandError, match="not installed"):
        GitClient().list_staged_files()


def test_get_staged_diff_runs_expected_command(monkeypatch) -> None:
    diff = "diff --git a/main.go b/main.go\n@@ -1 +1 @@\n-a\n+b\n"
    fake = _FakeRun([(0, diff)])
    monkeypatch.setattr(git_module.subprocess, "run", fake)

    result = GitClient().get_staged_diff("main.go")

    assert result == diff.strip()
    assert fake.calls[0]["command"] == [*_GIT, "diff", "--cached", "--unified=0", "--", "main.go"]


def test_get_staged_diff_empty_output(monkeypatch) -> None:
    monkeypatch.setattr(git_module.subprocess, "run", _FakeRun([(0, "\n")]))

    with pytest.raises(GitCommandError, match="no staged diff output"):
        GitClient().get_staged_diff("main.go")


def _git(cwd: Path, *args: str) -> None:
    subprocess.run(["git", *args], cwd=cwd, check=True, capture_output=True)


def _init_repo(path: Path) -> GitClient:
    _git(path, "init", "-q")
    return GitClient(GitClientConfig(cwd=str(path)))


@pytest.mark.integration
@pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")
def test_reads_staged_changes_from_real_repository(tmp_path: Path) -> None:
    client = _init_repo(tmp_path)
    (tmp_path / "main.go").write_text("package main\n\nfunc main() {}\n", encoding="utf-8")
    (tmp_path / "notes.txt").write_text("not go\n", encoding="utf-8")
    (tmp_path / "unstaged.go").write_text("package main\n", encoding="utf-8")
    _git(tmp_path, "add", "main.go", "notes.txt")

    assert client.list_staged_files() == ["main.go"]
    diff = client.get_staged_diff("main.go")
    assert "+package main" in diff


@pytest.mark.integration
@pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")
def test_real_git_outside_repository(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("GIT_CEILING_DIRECTORIES", str(tmp_path.parent))

    client = GitClient(GitClientConfig(cwd=str(tmp_path)))

    with pytest.raises(NotAGitRepositoryError) as excinfo:
        client.list_staged_files()

    assert "usage" not in str(excinfo.value).lower()


@pytest.mark.integration
@pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")
def test_real_git_non_utf8_content(tmp_path: Path) -> None:
    client = _init_repo(tmp_path)
    (tmp_path / "a.go").write_bytes(b"package main\n\n// caf\xe9\n")
    _git(tmp_path, "add", "a.go")

    assert client.list_staged_files() == ["a.go"]
    diff = client.get_staged_diff("a.go")
    assert "+// caf�" in diff


@pytest.mark.integration
@pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")
def test_real_git_non_ascii_file_name(tmp_path: Path) -> None:
    client = _init_repo(tmp_path)
    (tmp_path / "café.go").write_text("package main\n", encoding="utf-8")
    _git(tmp_path, "add", "café.go")

    files = client.list_staged_files()

    assert files == ["café.go"]
    assert "+package main" in client.get_staged_diff(files[0])
