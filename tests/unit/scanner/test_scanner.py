"""Scan coordinator ordering, multi-root merging, and git-change records."""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from diffdeck.config import ScanConfig
from diffdeck.errors import ConfigError, RootNotFoundError
from diffdeck.git_history import ChangeStatus, FileChange
from diffdeck.scanner import Scanner, records_from_changes, scan


def _write(root: Path, rel: str, text: str) -> None:
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


class ScannerTests(unittest.TestCase):
    def test_records_are_sorted_by_path(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            for rel in ("z.txt", "a/b.txt", "a.txt", "m/n/o.txt"):
                _write(root, rel, rel)

            records = Scanner(ScanConfig(ignore=(), workers=2)).scan([root])

            paths = [record.path for record in records]
            self.assertEqual(paths, sorted(paths))
            self.assertIn("m/n/o.txt", paths)

    def test_repeated_scans_are_identical(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            for index in range(25):
                _write(root, f"dir{index % 5}/file{index}.txt", f"{index}\n")

            scanner = Scanner(ScanConfig(ignore=(), workers=4))
            self.assertEqual(scanner.scan([root]), scanner.scan([root]))

    def test_missing_root_fails_before_scanning(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            with self.assertRaises(RootNotFoundError):
                Scanner(ScanConfig()).scan([root, root / "missing"])

    def test_duplicate_paths_across_roots_keep_first_root(self) -> None:
        with tempfile.TemporaryDirectory() as first_tmp, tempfile.TemporaryDirectory() as second_tmp:
            first, second = Path(first_tmp), Path(second_tmp)
            _write(first, "same.txt", "first\n")
            _write(second, "same.txt", "second\n")
            _write(second, "other.txt", "other\n")

            with self.assertLogs("diffdeck.scanner", level="WARNING"):
                records = Scanner(ScanConfig(ignore=())).scan([first, second])

            by_path = {record.path: record for record in records}
            self.assertEqual(sorted(by_path), ["other.txt", "same.txt"])
            self.assertEqual(by_path["same.txt"].content, "first\n")

    def test_directory_tree_view(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            _write(root, "pkg/a.txt", "a\n")
            _write(root, "top.txt", "t\n")

            records = Scanner(ScanConfig(ignore=(), directory_tree=True)).scan([root])

            self.assertEqual([record.path for record in records], ["pkg", "top.txt"])
            self.assertEqual([child.path for child in records[0].children], ["pkg/a.txt"])

    def test_scan_report_collects_errors(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            _write(root, "ok.txt", "ok\n")
            report = Scanner(ScanConfig(ignore=())).scan_report([root])
            self.assertEqual([record.path for record in report.records], ["ok.txt"])
            self.assertEqual(report.errors, [])

    def test_module_level_scan_uses_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            _write(root, "app.log", "noise\n")
            _write(root, "app.py", "print('hi')\n")
            self.assertEqual([record.path for record in scan([root])], ["app.py"])

    def test_rejects_non_scan_config(self) -> None:
        with self.assertRaises(ConfigError):
            Scanner({"include": []})  # type: ignore[arg-type]


class RecordsFromChangesTests(unittest.TestCase):
    def test_changes_are_filtered_classified_and_sorted(self) -> None:
        changes = [
            FileChange(path="src/new.go", status=ChangeStatus.ADDED, content=b"package src\n"),
            FileChange(path="node_modules/x.js", status=ChangeStatus.ADDED, content=b"x\n"),
            FileChange(path="gone.txt", status=ChangeStatus.DELETED, old_content=b"old\n"),
            FileChange(
                path="lib/renamed.py",
                status=ChangeStatus.RENAMED,
                content=b"x = 1\n",
                old_path="lib/original.py",
            ),
        ]

        records = records_from_changes(changes)

        self.assertEqual([record.path for record in records], ["gone.txt", "lib/renamed.py", "src/new.go"])
        by_path = {record.path: record for record in records}
        self.assertEqual(by_path["gone.txt"].change_status, "deleted")
        self.assertEqual(by_path["gone.txt"].content, "")
        self.assertEqual(by_path["lib/renamed.py"].old_path, "lib/original.py")
        self.assertEqual(by_path["src/new.go"].content, "package src\n")
        self.assertEqual(by_path["src/new.go"].change_status, "added")

    def test_size_ceiling_applies_to_changes(self) -> None:
        changes = [FileChange(path="big.txt", status=ChangeStatus.MODIFIED, content=b"x" * 50)]
        records = records_from_changes(changes, ScanConfig(ignore=(), max_file_size=10))
        self.assertEqual(records[0].size, 50)
        self.assertTrue(records[0].is_metadata_only)
        self.assertEqual(records[0].change_status, "modified")


if __name__ == "__main__":
    unittest.main()
