from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Callable

from .utils import fail

History = Callable[[str], list[int]]


class GitHistory:
    def __init__(self, repo_dir: Path, git: str = "git"):
        self.repo_dir = repo_dir
        self.git = git

    def __call__(self, rel_path: str) -> list[int]:
        command = [
            self.git,
            "-C",
            str(self.repo_dir),
            "log",
            "--pretty=%at",
            "-M",
            "--follow",
            "--",
            rel_path,
        ]
        try:
            result = subprocess.run(command, capture_output=True, text=True, encoding="utf-8")
        except FileNotFoundError:
            fail(f"git executable not found: {self.git}")
        if result.returncode != 0:
            fail(f"git log failed for {rel_path}: {result.stderr.strip()}")
        return parse_timestamps(result.stdout)


def parse_timestamps(output: str) -> list[int]:
    timestamps = []
    for field in output.split():
        try:
            timestamps.append(int(field))
        except ValueError:
            fail(f"unexpected output from git log: {field!r}")
    return timestamps


def resolve_timestamps(timestamps: list[int]) -> tuple[int, int]:
    """Return ``(creation, last_edited)`` from a newest-first history.

    Last edited is the largest timestamp. Creation is the last entry the log
    traversal reached, which is not always the smallest timestamp when the
    history contains merges or rewritten commits.
    """
    creation = 0
    last_edited = 0
    for timestamp in timestamps:
        last_edited = max(last_edited, timestamp)
        creation = timestamp
    return creation, last_edited
