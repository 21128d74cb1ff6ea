from __future__ import annotations

import os
import stat
import sys
import textwrap
from dataclasses import dataclass
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from scaffold_sync.tools.vcs import GitRepository  # noqa: E402

ANSWERS_FILE = ".copier-answers.yml"

FAKE_COPIER = textwrap.dedent(
    """
    #!/bin/sh
    printf '%s\\n' "$@" > "$FAKE_COPIER_ARGS"
    case "$FAKE_COPIER_MODE" in
      fail)
        echo "template repository not reachable" >&2
        exit 2
        ;;
      latin1)
        printf 'r\\351sum\\351 invalide\\n' >&2
        exit 1
        ;;
      noop)
        exit 0
        ;;
    esac
    printf '_commit: v2.0.0\\n_src_path: gh:acme/template\\n' > .copier-answers.yml
    printf 'rendered\\n' > README.md
    printf 'brand new\\n' > docs/added.md
    rm -f obsolete.txt
    """
).lstrip()


@dataclass(slots=True)
class TemplateRepo:
    """Fixture payload representing a repository rendered from a Copier template."""

    repo: GitRepository
    args_log: Path

    @property
    def root(self) -> Path:
        return self.repo.root

    def copier_args(self) -> list[str]:
        """Return the arguments received by the fake ``copier`` executable."""

        return self.args_log.read_text(encoding="utf-8").splitlines()


@pytest.fixture()
def template_repo(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> TemplateRepo:
    """Create a git repository with an answers file and a fake ``copier`` on PATH."""

    repo_root = tmp_path / "project"
    repo_root.mkdir()
    (repo_root / ANSWERS_FILE).write_text(
        "_commit: v1.0.0\n_src_path: gh:acme/template\n",
        encoding="utf-8",
    )
    (repo_root / "README.md").write_text("original\n", encoding="utf-8")
    (repo_root / "obsolete.txt").write_text("stale\n", encoding="utf-8")
    (repo_root / "docs").mkdir()
    (repo_root / "docs" / "index.md").write_text("# Docs\n", encoding="utf-8")
    repo = GitRepository.initialise(repo_root)

    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    script = bin_dir / "copier"
    script.write_text(FAKE_COPIER, encoding="utf-8")
    script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)

    args_log = tmp_path / "copier-args.log"
    monkeypatch.setenv("PATH", os.pathsep.join([str(bin_dir), os.environ.get("PATH", "")]))
    monkeypatch.setenv("FAKE_COPIER_ARGS", str(args_log))
    monkeypatch.setenv("FAKE_COPIER_MODE", "update")

    return TemplateRepo(repo=repo, args_log=args_log)
