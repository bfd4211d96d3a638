from pathlib import Path

import pytest

from twig.cli import _split_file_operand, main
from twig.config import TwigConfig
from twig.impl.fs import is_repository


@pytest.fixture
def run(tmp_path: Path, capsys):
    """Run the CLI in ``tmp_path`` and return (exit code, stdout)."""

    def _run(*argv: str) -> tuple[int, str]:
        code = main(["-C", str(tmp_path), *argv])
        return code, capsys.readouterr().out

    return _run


def test_split_file_operand():
    assert _split_file_operand(["checkout", "--", "a.txt"]) == (["checkout"], "a.txt")
    assert _split_file_operand(["-C", "x", "checkout", "abc", "--", "a.txt"]) == (
        ["-C", "x", "checkout", "abc"],
        "a.txt",
    )
    assert _split_file_operand(["checkout", "dev"]) == (["checkout", "dev"], None)
    assert _split_file_operand(["add", "--"]) == (["add", "--"], None)


def test_requires_initialized_directory(tmp_path: Path, run):
    code, out = run("status")

    assert code == 1
    assert out.strip() == "Not in an initialized twig directory."
    assert not (tmp_path / ".twig").exists()


def test_init_twice(tmp_path: Path, run):
    assert run("init") == (0, "")
    assert is_repository(tmp_path, TwigConfig())

    code, out = run("init")
    assert code == 1
    assert "already exists" in out


def test_add_commit_log(tmp_path: Path, run):
    run("init")
    (tmp_path / "a.txt").write_text("hello\n")

    assert run("add", "a.txt") == (0, "")
    assert run("commit", "first") == (0, "")

    code, out = run("log")
    assert code == 0
    entries = out.strip().split("\n\n")
    assert len(entries) == 2
    first, root = (entry.splitlines() for entry in entries)
    assert first[0] == "==="
    assert first[1].startswith("commit ") and len(first[1]) == len("commit ") + 40
    assert first[2].startswith("Date: ")
    assert first[3] == "first"
    assert root[2] == "Date: Thu Jan 01 00:00:00 1970 +0000"
    assert root[3] == "initial commit"


def test_commit_errors(tmp_path: Path, run):
    run("init")

    assert run("commit", "nothing") == (1, "No changes added to the commit.\n")

    (tmp_path / "a.txt").write_text("x")
    run("add", "a.txt")
    assert run("commit") == (1, "Please enter a commit message.\n")


def test_status_sections(tmp_path: Path, run):
    run("init")
    run("branch", "dev")
    (tmp_path / "a.txt").write_text("a")
    (tmp_path / "b.txt").write_text("b")
    run("add", "a.txt")

    code, out = run("status")

    assert code == 0
    assert out == (
        "=== Branches ===\n"
        "*master\n"
        "dev\n"
        "\n"
        "=== Staged Files ===\n"
        "a.txt\n"
        "\n"
        "=== Removed Files ===\n"
        "\n"
        "=== Modifications Not Staged For Commit ===\n"
        "\n"
        "=== Untracked Files ===\n"
        "b.txt\n"
        "\n"
    )


def test_checkout_file_operands(tmp_path: Path, run):
    run("init")
    path = tmp_path / "a.txt"
    path.write_text("1")
    run("add", "a.txt")
    run("commit", "one")
    _, out = run("find", "one")
    first_id = out.strip()

    path.write_text("2")
    run("add", "a.txt")
    run("commit", "two")

    path.write_text("scratch")
    assert run("checkout", "--", "a.txt") == (0, "")
    assert path.read_text() == "2"

    assert run("checkout", first_id[:8], "--", "a.txt") == (0, "")
    assert path.read_text() == "1"

    code, out = run("checkout", "--", "missing.txt")
    assert code == 1
    assert out == "File does not exist in that commit.\n"


def test_checkout_branch_errors(tmp_path: Path, run):
    run("init")

    assert run("checkout", "nope") == (1, "No such branch exists.\n")
    assert run("checkout", "master") == (1, "No need to checkout the current branch.\n")


def test_merge_conflict_message(tmp_path: Path, run):
    run("init")
    path = tmp_path / "a.txt"
    path.write_text("base\n")
    run("add", "a.txt")
    run("commit", "base")
    run("branch", "dev")

    path.write_text("master\n")
    run("add", "a.txt")
    run("commit", "master change")

    assert run("checkout", "dev") == (0, "")
    path.write_text("dev\n")
    run("add", "a.txt")
    run("commit", "dev change")
    run("checkout", "master")

    assert run("merge", "dev") == (0, "Encountered a merge conflict.\n")
    assert path.read_text() == "<<<<<<< HEAD\nmaster\n=======\ndev\n>>>>>>>\n"

    _, out = run("log")
    assert out.startswith("===\ncommit ")
    assert "\nMerge: " in out.split("\n\n")[0]
    assert "Merged dev into master." in out


def test_merge_fast_forward_message(tmp_path: Path, run):
    run("init")
    run("branch", "dev")
    run("checkout", "dev")
    (tmp_path / "a.txt").write_text("a")
    run("add", "a.txt")
    run("commit", "dev work")
    run("checkout", "master")

    assert not (tmp_path / "a.txt").exists()
    assert run("merge", "dev") == (0, "Current branch fast-forwarded.\n")
    assert (tmp_path / "a.txt").read_text() == "a"


def test_find_missing_message(tmp_path: Path, run):
    run("init")
    assert run("find", "nope") == (1, "Found no commit with that message.\n")


def test_add_rejects_paths_outside_top_level(tmp_path: Path, run):
    run("init")
    (tmp_path / "sub").mkdir()
    (tmp_path / "sub" / "x.txt").write_text("nested")

    assert run("add", "sub/x.txt") == (1, "File does not exist.\n")
    assert run("add", "../x.txt") == (1, "File does not exist.\n")
    assert run("checkout", "--", "sub/x.txt") == (
        1,
        "File does not exist in that commit.\n",
    )
