"""Tests for the replace executor."""

import pytest
from pathlib import Path

from packager.exec.replace import ReplaceExecutor, translate_replacement
from packager.exceptions import CommandIOError, InvalidPattern, NoFilesMatched
from packager.models import Replace


class TestReplaceExecutor:
    """Test Replace command execution."""

    def setup_method(self):
        self.executor = ReplaceExecutor()

    def test_replaces_all_matches_in_all_files(self, tmp_path):
        (tmp_path / "a.cfg").write_text("version=1\nname=x\nversion=1\n")
        (tmp_path / "b.cfg").write_text("version=7\n")
        (tmp_path / "c.txt").write_text("version=1\n")

        rewritten = self.executor.execute(Replace(
            source=str(tmp_path / "*.cfg"),
            regex=r"version=\d+",
            replacement="version=2",
        ))

        assert rewritten == 2
        assert (tmp_path / "a.cfg").read_text() == "version=2\nname=x\nversion=2\n"
        assert (tmp_path / "b.cfg").read_text() == "version=2\n"
        assert (tmp_path / "c.txt").read_text() == "version=1\n"

    def test_group_references_in_replacement(self, tmp_path):
        target = tmp_path / "v.txt"
        target.write_text("version=1.2\n")

        self.executor.execute(Replace(
            source=str(target),
            regex=r"version=(\d+)\.(\d+)",
            replacement="version=$1.$2.0",
        ))

        assert target.read_text() == "version=1.2.0\n"

    def test_named_and_braced_group_references(self, tmp_path):
        target = tmp_path / "setup.cfg"
        target.write_text("name = demo-1.2\n")

        self.executor.execute(Replace(
            source=str(target),
            regex=r"(?P<pkg>\w+)-(\d+)\.(\d+)",
            replacement="$pkg v${3}.${2}",
        ))

        assert target.read_text() == "name = demo v2.1\n"

    def test_backslashes_in_replacement_are_literal(self, tmp_path):
        """A Windows path in the replacement is written as-is, not as escapes."""
        target = tmp_path / "paths.ini"
        target.write_text("path=old\n")

        self.executor.execute(Replace(source=str(target), regex="old", replacement=r"C:\new\d"))

        assert target.read_text() == "path=C:\\new\\d\n"

    def test_dollar_escapes_in_replacement(self, tmp_path):
        target = tmp_path / "price.txt"
        target.write_text("price=5\n")

        self.executor.execute(Replace(source=str(target), regex=r"price=(\d)", replacement="price=$$$1 $"))

        assert target.read_text() == "price=$5 $\n"

    def test_recursive_glob(self, tmp_path):
        (tmp_path / "a" / "b").mkdir(parents=True)
        (tmp_path / "top.txt").write_text("x")
        (tmp_path / "a" / "b" / "deep.txt").write_text("x")

        rewritten = self.executor.execute(Replace(source=str(tmp_path / "**" / "*.txt"), regex="x", replacement="y"))

        assert rewritten == 2
        assert (tmp_path / "a" / "b" / "deep.txt").read_text() == "y"

    def test_directories_skipped(self, tmp_path):
        (tmp_path / "dir.txt").mkdir()
        (tmp_path / "file.txt").write_text("old")

        rewritten = self.executor.execute(Replace(source=str(tmp_path / "*.txt"), regex="old", replacement="new"))

        assert rewritten == 1
        assert (tmp_path / "file.txt").read_text() == "new"

    def test_only_directories_matched_is_not_an_error(self, tmp_path):
        (tmp_path / "only_dir").mkdir()

        assert self.executor.execute(Replace(source=str(tmp_path / "only_*"), regex="a", replacement="b")) == 0

    def test_line_endings_preserved(self, tmp_path):
        target = tmp_path / "win.txt"
        target.write_bytes(b"one\r\ntwo\r\n")

        self.executor.execute(Replace(source=str(target), regex="two", replacement="2"))

        assert target.read_bytes() == b"one\r\n2\r\n"

    def test_no_match_in_content_still_rewrites(self, tmp_path):
        target = tmp_path / "same.txt"
        target.write_text("unchanged")

        assert self.executor.execute(Replace(source=str(target), regex="zzz", replacement="y")) == 1
        assert target.read_text() == "unchanged"

    def test_zero_glob_matches_is_an_error(self, tmp_path):
        """An empty glob expansion fails instead of silently succeeding."""
        with pytest.raises(NoFilesMatched) as exc_info:
            self.executor.execute(Replace(source=str(tmp_path / "*.missing"), regex="a", replacement="b"))

        assert exc_info.value.kind == "replace"

    def test_invalid_regex(self, tmp_path):
        (tmp_path / "a.txt").write_text("a")

        with pytest.raises(InvalidPattern):
            self.executor.execute(Replace(source=str(tmp_path / "a.txt"), regex="(unclosed", replacement="b"))

        assert (tmp_path / "a.txt").read_text() == "a"

    def test_invalid_regex_checked_before_glob(self, tmp_path):
        with pytest.raises(InvalidPattern):
            self.executor.execute(Replace(source=str(tmp_path / "*.none"), regex="[", replacement="b"))

    def test_invalid_replacement_template(self, tmp_path):
        (tmp_path / "a.txt").write_text("abc")

        with pytest.raises(InvalidPattern):
            self.executor.execute(Replace(source=str(tmp_path / "a.txt"), regex="b", replacement="$5"))

    def test_unreadable_file_aborts_after_earlier_files(self, tmp_path):
        """Files rewritten before the failing one keep their new contents."""
        (tmp_path / "1.txt").write_text("old")
        (tmp_path / "2.txt").write_bytes(b"\xff\xfe not utf-8 \x80")
        (tmp_path / "3.txt").write_text("old")

        with pytest.raises(CommandIOError):
            self.executor.execute(Replace(source=str(tmp_path / "*.txt"), regex="old", replacement="new"))

        assert (tmp_path / "1.txt").read_text() == "new"
        assert (tmp_path / "3.txt").read_text() == "old"

    def test_relative_glob_resolved_against_workspace(self, tmp_path):
        (tmp_path / "conf").mkdir()
        (tmp_path / "conf" / "app.ini").write_text("debug=true")

        executor = ReplaceExecutor(workspace=tmp_path)
        executor.execute(Replace(source="conf/*.ini", regex="true", replacement="false"))

        assert (tmp_path / "conf" / "app.ini").read_text() == "debug=false"

    def test_expand_sorted(self, tmp_path):
        for name in ["b.txt", "a.txt", "c.txt"]:
            (tmp_path / name).write_text("")

        paths = ReplaceExecutor(workspace=tmp_path).expand("*.txt")

        assert [Path(p).name for p in paths] == ["a.txt", "b.txt", "c.txt"]


class TestTranslateReplacement:
    """Test conversion of $-style templates to Python re templates."""

    def test_numbered_references(self):
        assert translate_replacement("$1-${2}") == r"\g<1>-\g<2>"

    def test_named_references(self):
        assert translate_replacement("$pkg ${pkg}") == r"\g<pkg> \g<pkg>"

    def test_dollar_dollar(self):
        assert translate_replacement("$$1") == "$1"

    def test_backslashes_escaped(self):
        assert translate_replacement(r"a\1\n") == r"a\\1\\n"

    def test_lone_dollar_kept(self):
        assert translate_replacement("cost: $ {x} $-") == "cost: $ {x} $-"
