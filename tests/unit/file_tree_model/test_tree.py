"""Hierarchical view derived from flat record lists."""

from __future__ import annotations

import unittest

from diffdeck.file_tree_model import FileRecord, build_directory_tree, iter_tree


class BuildDirectoryTreeTests(unittest.TestCase):
    def test_implied_directories_are_synthesized_and_sorted(self) -> None:
        records = [
            FileRecord(path="src/pkg/b.go", size=2),
            FileRecord(path="README.md", size=1),
            FileRecord(path="src/a.go", size=3),
        ]

        tree = build_directory_tree(records)

        self.assertEqual([node.path for node in tree], ["README.md", "src"])
        src = tree[1]
        self.assertTrue(src.is_dir)
        self.assertEqual([child.path for child in src.children], ["src/a.go", "src/pkg"])
        pkg = src.children[1]
        self.assertTrue(pkg.is_dir)
        self.assertEqual([child.path for child in pkg.children], ["src/pkg/b.go"])

    def test_every_path_appears_once(self) -> None:
        records = [
            FileRecord(path="a", is_dir=True),
            FileRecord(path="a/x.txt", size=1),
            FileRecord(path="a/x.txt", size=9),
            FileRecord(path="a/y.txt", size=1),
        ]

        flattened = [record.path for _depth, record in iter_tree(build_directory_tree(records))]

        self.assertEqual(flattened, ["a", "a/x.txt", "a/y.txt"])

    def test_existing_directory_record_is_kept(self) -> None:
        directory = FileRecord(path="docs", is_dir=True)
        tree = build_directory_tree([directory, FileRecord(path="docs/index.md", size=4)])
        self.assertEqual(tree[0].path, "docs")
        self.assertEqual(len(tree[0].children), 1)

    def test_file_record_shadowed_by_children_is_replaced_with_warning(self) -> None:
        records = [
            FileRecord(path="x", size=1, mime_type="text/plain", is_text=True, content="a"),
            FileRecord(path="x/y.txt", size=1),
        ]

        with self.assertLogs("diffdeck.file_tree_model.tree", level="WARNING") as logs:
            tree = build_directory_tree(records)

        self.assertIn("x", "\n".join(logs.output))
        self.assertEqual(len(tree), 1)
        self.assertTrue(tree[0].is_dir)
        self.assertEqual(tree[0].content, "")
        self.assertEqual([child.path for child in tree[0].children], ["x/y.txt"])

    def test_iter_tree_reports_depth(self) -> None:
        tree = build_directory_tree([FileRecord(path="a/b/c.txt", size=1)])
        self.assertEqual(
            [(depth, record.name) for depth, record in iter_tree(tree)],
            [(0, "a"), (1, "b"), (2, "c.txt")],
        )


class FileRecordTests(unittest.TestCase):
    def test_directory_cannot_carry_content(self) -> None:
        with self.assertRaises(ValueError):
            FileRecord(path="d", is_dir=True, content="x")

    def test_file_cannot_have_children(self) -> None:
        with self.assertRaises(ValueError):
            FileRecord(path="f", children=(FileRecord(path="f/g"),))

    def test_metadata_only_flag(self) -> None:
        self.assertTrue(FileRecord(path="big.bin", size=10).is_metadata_only)
        self.assertFalse(FileRecord(path="empty.txt", size=0).is_metadata_only)
        self.assertFalse(FileRecord(path="a.txt", size=3, mime_type="text/plain", is_text=True).is_metadata_only)


if __name__ == "__main__":
    unittest.main()
