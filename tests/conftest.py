from __future__ import annotations

import sys
from collections.abc import Sequence
from pathlib import Path

import pytest
from loguru import logger

from depvendor.core.exceptions import CommandError


class FakeVcs:
    """git/hg の clone・rev-parse・reset・fetch を模したコマンドランナー.

    リモートはリビジョン列（末尾がデフォルトブランチの先頭）として保持し、
    チェックアウトの状態は clone 先のパスごとに記録する。
    """

    def __init__(self) -> None:
        self.calls: list[tuple[tuple[str, ...], Path]] = []
        self.raw_calls: list[tuple[str, ...]] = []
        self.remotes: dict[str, list[str]] = {}
        self.failures: set[str] = set()
        self.checkouts: dict[Path, dict] = {}

    def add_remote(self, repo: str, *revisions: str) -> None:
        self.remotes[repo] = list(revisions)

    def push(self, repo: str, revision: str) -> None:
        self.remotes[repo].append(revision)

    def head(self, path: Path) -> str:
        return self.checkouts[Path(path).resolve()]["head"]

    def subcommands(self, start: int = 0) -> list[str]:
        return [f"{command[0]} {command[1]}" for command, _ in self.calls[start:]]

    def mutating_calls(self, start: int = 0) -> list[tuple[str, ...]]:
        return [command for command, _ in self.calls[start:] if command[1] != "rev-parse"]

    def _strip_repository_options(self, command: tuple[str, ...], cwd: Path) -> tuple[str, ...]:
        """--git-dir/--work-tree を取り除く。指す先は cwd のチェックアウトでなければならない."""
        options = [arg for arg in command[1:] if arg.startswith(("--git-dir=", "--work-tree="))]
        for option in options:
            key, _, value = option.partition("=")
            expected = cwd / ".git" if key == "--git-dir" else cwd
            assert Path(value) == expected, f"{key} points at {value}, expected {expected}"
        return (command[0],) + tuple(arg for arg in command[1:] if arg not in options)

    def _fail(self, command: tuple[str, ...], message: str) -> None:
        raise CommandError(command, 128, message)

    def __call__(self, command: Sequence[str], cwd: Path) -> str:
        self.raw_calls.append(tuple(command))
        command = self._strip_repository_options(tuple(command), Path(cwd))
        self.calls.append((command, Path(cwd)))
        tool, sub = command[0], command[1]
        if sub in self.failures:
            self._fail(command, f"fatal: simulated {sub} failure")
        if tool == "git":
            return getattr(self, f"_git_{sub.replace('-', '_')}")(command, Path(cwd))
        if tool == "hg" and sub == "clone":
            return self._hg_clone(command, Path(cwd))
        self._fail(command, f"unknown command {' '.join(command)}")
        return ""

    def _clone(self, command: tuple[str, ...], repo: str, dest: Path, marker: str, head: str | None = None) -> None:
        if repo not in self.remotes:
            self._fail(command, f"fatal: repository '{repo}' does not exist")
        if dest.exists() and any(dest.iterdir()):
            self._fail(command, f"fatal: destination path '{dest}' already exists and is not an empty directory")
        (dest / marker).mkdir(parents=True)
        revisions = self.remotes[repo]
        self.checkouts[dest.resolve()] = {
            "repo": repo,
            "head": head or revisions[-1],
            "known": set(revisions),
        }

    def _git_clone(self, command: tuple[str, ...], cwd: Path) -> str:
        repo, dest = command[3], Path(command[4])
        self._clone(command, repo, dest if dest.is_absolute() else cwd / dest, ".git")
        return ""

    def _checkout(self, command: tuple[str, ...], cwd: Path) -> dict:
        state = self.checkouts.get(cwd.resolve())
        if state is None or not (cwd / ".git").is_dir():
            self._fail(command, "fatal: not a git repository (or any of the parent directories): .git")
        return state

    def _git_rev_parse(self, command: tuple[str, ...], cwd: Path) -> str:
        return self._checkout(command, cwd)["head"]

    def _git_reset(self, command: tuple[str, ...], cwd: Path) -> str:
        state = self._checkout(command, cwd)
        revision = command[-1]
        if revision not in state["known"]:
            self._fail(command, f"fatal: ambiguous argument '{revision}': unknown revision")
        state["head"] = revision
        return ""

    def _git_fetch(self, command: tuple[str, ...], cwd: Path) -> str:
        state = self._checkout(command, cwd)
        state["known"].update(self.remotes[state["repo"]])
        return ""

    def _hg_clone(self, command: tuple[str, ...], cwd: Path) -> str:
        revision, repo, dest = command[4], command[5], Path(command[6])
        if repo in self.remotes and revision not in self.remotes[repo]:
            self._fail(command, f"abort: unknown revision '{revision}'")
        self._clone(command, repo, dest if dest.is_absolute() else cwd / dest, ".hg", head=revision)
        return ""


@pytest.fixture
def fake_vcs() -> FakeVcs:
    return FakeVcs()


@pytest.fixture
def vendor_root(tmp_path: Path) -> Path:
    root = tmp_path / "_vendor" / "src"
    root.mkdir(parents=True)
    return root.resolve()


@pytest.fixture(autouse=True)
def _restore_loguru():
    yield
    # CLIがsinkを差し替えるため、テストごとに既定のsinkへ戻す
    logger.remove()
    logger.add(sys.stderr)
