from __future__ import annotations

from scaffold_sync.tools.vcs import RepoStatus, parse_porcelain_status


def _payload(*entries: str) -> str:
    return "".join(f"{entry}\0" for entry in entries)


def test_parse_buckets_common_codes() -> None:
    status = parse_porcelain_status(
        _payload(
            " M .copier-answers.yml",
            "M  staged.py",
            "MM both.py",
            " T link",
            "A  added.py",
            "?? new dir/file.txt",
            " D removed.txt",
            "D  staged-removed.txt",
        )
    )

    assert status.modified == [".copier-answers.yml", "staged.py", "both.py", "link"]
    assert status.not_added == ["added.py", "new dir/file.txt"]
    assert status.deleted == ["removed.txt", "staged-removed.txt"]
    assert status.conflicted == []


def test_parse_conflict_codes() -> None:
    status = parse_porcelain_status(
        _payload("UU a.txt", "AA b.txt", "DU c.txt", "UD d.txt", "DD e.txt")
    )

    assert status.conflicted == ["a.txt", "b.txt", "c.txt", "d.txt", "e.txt"]
    assert status.deleted == []
    assert status.modified == []


def test_parse_rename_consumes_original_path() -> None:
    status = parse_porcelain_status(_payload("R  new.txt", "old.txt", " M other.txt"))

    assert status.not_added == ["new.txt"]
    assert status.deleted == ["old.txt"]
    assert status.modified == ["other.txt"]


def test_parse_empty_payload_is_clean() -> None:
    status = parse_porcelain_status("")

    assert status == RepoStatus()
    assert status.is_clean
