"""Tests for bumpkit.commits."""

from __future__ import annotations

import click

from bumpkit.commits import (
    determine_semver_change,
    format_commits,
    parse_commits,
    parse_git_commit,
)
from bumpkit.models import GitCommit

# Excerpt of real `git log --pretty=----%n%s|%h|%an|%ae%n%b` output
LOG_FIXTURE = """
----
chore: release v9.10.2|db6e8dd|Anthony Fu|github@antfu.me

----
fix: version update issue (#70)|8f08209|Blithe-Chiang|40333428+Blithe-Chiang@users.noreply.github.com
Co-authored-by: jiangzs <2373806028@qq.com>
----
feat!: fake more colors for semantic commit tags|40b4edb|Anthony Fu|github@antfu.me

----
fix: throw on exec error, fix #67|52816cc|Anthony Fu|github@antfu.me

----
fix: --exec ENOENT tinyexec args, close #62 (#63)|1eda378|yunyoujun@example.cn
Co-authored-by: Anthony Fu <github@antfu.me>

----
feat(cli): support signing git commits and tags (#47)|312cf50|Neko|neko@ayaka.moe

----
Merge branch 'main' into next|aa11bb2|Neko|neko@ayaka.moe
"""


class TestParseCommits:
    def test_parses_every_block_in_order(self) -> None:
        commits = parse_commits(LOG_FIXTURE)
        assert [c.short_hash for c in commits] == [
            "db6e8dd",
            "8f08209",
            "40b4edb",
            "52816cc",
            "1eda378",
            "312cf50",
            "aa11bb2",
        ]

    def test_empty_log(self) -> None:
        assert parse_commits("") == []
        assert parse_commits("\n----\n") == []

    def test_simple_commit(self) -> None:
        commit = parse_commits(LOG_FIXTURE)[0]
        assert commit.message == "chore: release v9.10.2"
        assert commit.type == "chore"
        assert commit.scope == ""
        assert commit.description == "release v9.10.2"
        assert commit.body == ""
        assert not commit.is_breaking
        assert [(r.type, r.value) for r in commit.references] == [("hash", "db6e8dd")]
        assert [(a.name, a.email) for a in commit.authors] == [("Anthony Fu", "github@antfu.me")]

    def test_pull_request_reference_is_stripped(self) -> None:
        commit = parse_commits(LOG_FIXTURE)[1]
        assert commit.description == "version update issue"
        assert [(r.type, r.value) for r in commit.references] == [
            ("pull-request", "#70"),
            ("hash", "8f08209"),
        ]

    def test_co_author_is_appended(self) -> None:
        commit = parse_commits(LOG_FIXTURE)[1]
        assert commit.body == "Co-authored-by: jiangzs <2373806028@qq.com>"
        assert [(a.name, a.email) for a in commit.authors] == [
            ("Blithe-Chiang", "40333428+Blithe-Chiang@users.noreply.github.com"),
            ("jiangzs", "2373806028@qq.com"),
        ]

    def test_breaking_marker(self) -> None:
        commit = parse_commits(LOG_FIXTURE)[2]
        assert commit.type == "feat"
        assert commit.is_breaking
        assert commit.description == "fake more colors for semantic commit tags"

    def test_issue_reference_kept_in_description(self) -> None:
        commit = parse_commits(LOG_FIXTURE)[3]
        assert commit.description == "throw on exec error, fix #67"
        assert [(r.type, r.value) for r in commit.references] == [
            ("issue", "#67"),
            ("hash", "52816cc"),
        ]

    def test_pull_request_then_issue(self) -> None:
        commit = parse_commits(LOG_FIXTURE)[4]
        assert commit.description == "--exec ENOENT tinyexec args, close #62"
        assert [(r.type, r.value) for r in commit.references] == [
            ("pull-request", "#63"),
            ("issue", "#62"),
            ("hash", "1eda378"),
        ]

    def test_missing_email(self) -> None:
        commit = parse_commits(LOG_FIXTURE)[4]
        assert commit.authors[0].name == "yunyoujun@example.cn"
        assert commit.authors[0].email is None

    def test_scope(self) -> None:
        commit = parse_commits(LOG_FIXTURE)[5]
        assert commit.type == "feat"
        assert commit.scope == "cli"
        assert commit.description == "support signing git commits and tags"

    def test_non_conventional_commit(self) -> None:
        commit = parse_commits(LOG_FIXTURE)[6]
        assert commit.type == ""
        assert commit.description == "Merge branch 'main' into next"
        assert not commit.is_breaking

    def test_breaking_change_footer(self) -> None:
        commit = parse_git_commit(
            "refactor: drop node 14|abc1234|Jane|jane@example.com\n\nBREAKING CHANGE: requires node 16"
        )
        assert commit.is_breaking

    def test_duplicate_co_authors_are_kept(self) -> None:
        body = "Co-authored-by: Sam <sam@example.com>\nCo-authored-by: Sam <sam@example.com>"
        commit = parse_git_commit(f"fix: x|abc1234|Jane|jane@example.com\n{body}")
        assert [a.name for a in commit.authors] == ["Jane", "Sam", "Sam"]

    def test_marker_requires_whole_line(self) -> None:
        raw = "----\nfix: a|1111111|Jane|j@example.com\n----- not a marker\n----\nfix: b|2222222|Jane|j@example.com\n"
        commits = parse_commits(raw)
        assert [c.short_hash for c in commits] == ["1111111", "2222222"]
        assert commits[0].body == "----- not a marker"


class TestDetermineSemverChange:
    def test_empty(self) -> None:
        assert determine_semver_change([]) == "patch"

    def test_fixes_only(self) -> None:
        commits = [GitCommit(short_hash="a", message="fix: a", type="fix")]
        assert determine_semver_change(commits) == "patch"

    def test_feature(self) -> None:
        commits = [
            GitCommit(short_hash="a", message="fix: a", type="fix"),
            GitCommit(short_hash="b", message="feat: b", type="feat"),
        ]
        assert determine_semver_change(commits) == "minor"

    def test_breaking_wins(self) -> None:
        assert determine_semver_change(parse_commits(LOG_FIXTURE)) == "major"


class TestFormatCommits:
    def test_one_line_per_commit(self) -> None:
        commits = parse_commits(LOG_FIXTURE)
        lines = [click.unstyle(line) for line in format_commits(commits)]
        assert len(lines) == len(commits)
        assert lines[0].startswith("db6e8dd")
        assert "feat!" in lines[2]
        assert "cli" in lines[5]

    def test_empty(self) -> None:
        assert format_commits([]) == []
