from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from diffdeck.gitignore import collect_gitignore_lines, load_gitignore_lines


class GitignoreLoadingTests(unittest.TestCase):
    def test_missing_file_yields_no_lines(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            self.assertEqual(load_gitignore_lines(Path(tmp)), [])

    def test_file_root_yields_no_lines(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            file_root = Path(tmp) / "main.go"
            file_root.write_text("package main\n", encoding="utf-8")
            self.assertEqual(load_gitignore_lines(file_root), [])

    def test_comments_and_blanks_dropped_rules_kept_verbatim(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            (root / ".gitignore").write_text(
                "# deps\n\nnode_modules/\n*.log\n!keep.log\ndocs/build\n\\#literal\n",
                encoding="utf-8",
            )
            self.assertEqual(
                load_gitignore_lines(root),
                ["node_modules/", "*.log", "!keep.log", "docs/build", "\\#literal"],
            )

    def test_lines_from_several_roots_keep_root_order(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            first = Path(tmp) / "a"
            second = Path(tmp) / "b"
            first.mkdir()
            second.mkdir()
            (first / ".gitignore").write_text("*.log\nbuild/\n", encoding="utf-8")
            (second / ".gitignore").write_text("*.log\n!debug.log\n", encoding="utf-8")
            self.assertEqual(
                collect_gitignore_lines([first, second]),
                ["*.log", "build/", "*.log", "!debug.log"],
            )


if __name__ == "__main__":
    unittest.main()
