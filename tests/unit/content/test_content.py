"""Output-time content transforms."""

from __future__ import annotations

import unittest

from diffdeck.content import add_line_numbers, remove_comments, remove_empty_lines, transform_content


class RemoveCommentsTests(unittest.TestCase):
    def test_slash_comments(self) -> None:
        source = "package main\n// line comment\n/* block\n still block */\nfunc main() {}\n"
        self.assertEqual(remove_comments(source, "main.go"), "package main\nfunc main() {}\n")

    def test_single_line_block_comment(self) -> None:
        self.assertEqual(remove_comments("/* one */\nlet x = 1;", "a.js"), "let x = 1;")

    def test_hash_comments(self) -> None:
        self.assertEqual(remove_comments("# header\nx = 1\n    # indented\n", "a.py"), "x = 1\n")

    def test_markup_comments(self) -> None:
        self.assertEqual(remove_comments("<!-- note -->\n<a/>", "a.xml"), "<a/>")

    def test_unknown_suffix_is_untouched(self) -> None:
        self.assertEqual(remove_comments("# not a comment here", "notes.md"), "# not a comment here")


class LineTransformTests(unittest.TestCase):
    def test_remove_empty_lines(self) -> None:
        self.assertEqual(remove_empty_lines("a\n\n  \nb"), "a\nb")

    def test_add_line_numbers(self) -> None:
        self.assertEqual(add_line_numbers("a\nb"), "    1 | a\n    2 | b")

    def test_transform_applies_in_order(self) -> None:
        result = transform_content(
            "# c\n\nx = 1\n",
            "m.py",
            strip_comments=True,
            drop_empty_lines=True,
            line_numbers=True,
        )
        self.assertEqual(result, "    1 | x = 1")

    def test_transform_without_options_is_identity(self) -> None:
        self.assertEqual(transform_content("a\n\nb", "a.go"), "a\n\nb")


if __name__ == "__main__":
    unittest.main()
