"""Configuration defaults, validation, and JSON loading."""

from __future__ import annotations

import json
import os
import tempfile
import unittest
from dataclasses import replace
from pathlib import Path
from unittest import mock

from diffdeck.config import (
    DEFAULT_IGNORE_PATTERNS,
    Config,
    OutputStyle,
    ScanConfig,
    config_from_dict,
    load_config,
)
from diffdeck.errors import ConfigError


class ScanConfigTests(unittest.TestCase):
    def test_defaults(self) -> None:
        config = ScanConfig()
        self.assertEqual(config.include, ())
        self.assertEqual(config.ignore, DEFAULT_IGNORE_PATTERNS)
        self.assertTrue(config.case_sensitive)
        self.assertEqual(config.max_file_size, 10 * 1024 * 1024)
        self.assertEqual(config.workers, 10)
        self.assertFalse(config.raw_content)

    def test_invalid_values_raise(self) -> None:
        with self.assertRaises(ConfigError):
            ScanConfig(workers=0)
        with self.assertRaises(ConfigError):
            ScanConfig(max_file_size=-1)
        with self.assertRaises(ConfigError):
            ScanConfig(include=None)  # type: ignore[arg-type]
        with self.assertRaises(ConfigError):
            ScanConfig(ignore=("ok", 1))  # type: ignore[arg-type]

    def test_lists_are_frozen_to_tuples(self) -> None:
        config = ScanConfig(include=["*.go"], ignore=[])  # type: ignore[arg-type]
        self.assertEqual(config.include, ("*.go",))
        self.assertEqual(config.ignore, ())

    def test_replace_produces_new_object(self) -> None:
        base = ScanConfig()
        changed = replace(base, workers=2)
        self.assertEqual(base.workers, 10)
        self.assertEqual(changed.workers, 2)


class ConfigFromDictTests(unittest.TestCase):
    def test_camel_case_keys(self) -> None:
        config = config_from_dict(
            {
                "output": {
                    "filePath": "out.txt",
                    "style": "plain",
                    "topFilesLength": 3,
                    "showLineNumbers": True,
                    "copyToClipboard": True,
                },
                "include": ["src/**"],
                "ignore": {"useGitignore": False, "customPatterns": ["*.bak"]},
                "security": {"enableSecurityCheck": False},
                "scan": {"caseSensitive": False, "maxFileSize": 1024, "workers": 4},
            }
        )
        self.assertEqual(config.output.file_path, "out.txt")
        self.assertIs(config.output.style, OutputStyle.PLAIN)
        self.assertEqual(config.output.top_files_length, 3)
        self.assertTrue(config.output.show_line_numbers)
        self.assertTrue(config.output.copy_to_clipboard)
        self.assertEqual(config.include, ("src/**",))
        self.assertFalse(config.ignore.use_gitignore)
        self.assertEqual(config.ignore.custom_patterns, ("*.bak",))
        self.assertFalse(config.security.enable_security_check)
        self.assertFalse(config.scan.case_sensitive)
        self.assertEqual(config.scan.max_file_size, 1024)
        self.assertEqual(config.scan.workers, 4)

    def test_wrong_types_raise(self) -> None:
        for data in (
            {"output": {"topFilesLength": "five"}},
            {"scan": {"workers": True}},
            {"output": {"copyToClipboard": "yes"}},
            {"ignore": {"customPatterns": "*.bak"}},
            {"output": {"style": "markdown"}},
            {"include": "src/**"},
            [],
        ):
            with self.subTest(data=data):
                with self.assertRaises(ConfigError):
                    config_from_dict(data)

    def test_unknown_keys_are_ignored(self) -> None:
        config = config_from_dict({"output": {"somethingNew": 1}})
        self.assertEqual(config, Config())


class IgnorePatternTests(unittest.TestCase):
    def test_defaults_then_custom_patterns(self) -> None:
        config = config_from_dict({"ignore": {"customPatterns": ["*.bak"]}})
        patterns = config.ignore_patterns()
        self.assertEqual(patterns, list(DEFAULT_IGNORE_PATTERNS) + ["*.bak"])

    def test_gitignore_lines_are_kept_apart_from_globs(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            (root / ".gitignore").write_text("build/\n*.pyc\n!keep.pyc\n", encoding="utf-8")
            config = config_from_dict({"ignore": {"customPatterns": ["*.bak"]}})

            self.assertEqual(config.gitignore_lines([root]), ["build/", "*.pyc", "!keep.pyc"])
            scan_config = config.scan_config([root])
            self.assertEqual(scan_config.gitignore, ("build/", "*.pyc", "!keep.pyc"))
            self.assertNotIn("build/", scan_config.ignore)

    def test_disabled_sources_are_skipped(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            (root / ".gitignore").write_text("build/\n", encoding="utf-8")
            config = config_from_dict({"ignore": {"useGitignore": False, "useDefaultPatterns": False}})
            self.assertEqual(config.ignore_patterns(), [])
            self.assertEqual(config.gitignore_lines([root]), [])

    def test_scan_config_carries_scan_options(self) -> None:
        config = config_from_dict({"include": ["*.go"], "scan": {"workers": 2}})
        scan_config = config.scan_config([], directory_tree=True)
        self.assertEqual(scan_config.include, ("*.go",))
        self.assertEqual(scan_config.workers, 2)
        self.assertTrue(scan_config.directory_tree)


class LoadConfigTests(unittest.TestCase):
    def test_explicit_path(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "custom.json"
            path.write_text(json.dumps({"scan": {"workers": 3}}), encoding="utf-8")
            self.assertEqual(load_config(path).scan.workers, 3)

    def test_missing_explicit_path_raises(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(ConfigError):
                load_config(Path(tmp) / "absent.json")

    def test_malformed_json_raises(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "bad.json"
            path.write_text("{not json", encoding="utf-8")
            with self.assertRaises(ConfigError):
                load_config(path)

    def test_local_file_then_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            previous_cwd = Path.cwd()
            try:
                os.chdir(root)
                with mock.patch("diffdeck.config.USER_CONFIG_PATH", root / "no-user-config.json"):
                    self.assertEqual(load_config(), Config())
                    (root / "diffdeck.config.json").write_text(
                        json.dumps({"output": {"filePath": "local.txt"}}),
                        encoding="utf-8",
                    )
                    self.assertEqual(load_config().output.file_path, "local.txt")
            finally:
                os.chdir(previous_cwd)


if __name__ == "__main__":
    unittest.main()
