from __future__ import annotations

from pathlib import Path
import tempfile
import textwrap
import unittest
from unittest.mock import patch

from bundler.externals import NODE_BUILTIN_MODULES
from bundler.settings import DEFAULT_SETTINGS, BundlerSettings, load_settings


class SettingsTests(unittest.TestCase):
    def setUp(self) -> None:
        self.temp_dir = tempfile.TemporaryDirectory()
        self.workspace = Path(self.temp_dir.name)

    def tearDown(self) -> None:
        self.temp_dir.cleanup()

    def test_defaults_without_a_settings_file(self) -> None:
        settings = load_settings(self.workspace, environ={})
        self.assertEqual(settings, BundlerSettings.defaults())
        self.assertEqual(settings.entry, "src/index.ts")
        self.assertEqual(settings.tsconfig, "tsconfig.json")
        self.assertEqual(settings.rollup, ("node_modules/.bin/rollup",))
        self.assertEqual(settings.exclude, ("test", "tests", "node_modules", "docs", "src/themes"))
        self.assertEqual(settings.builtin_modules, NODE_BUILTIN_MODULES)
        self.assertEqual(settings.themes.entry, "src/themes/index.ts")
        self.assertEqual(settings.themes.output, "dist/themes/es/index.js")
        self.assertEqual(settings.themes.declaration_dir, "dist/themes/types")
        self.assertEqual(settings.themes.include, ("src/themes",))
        self.assertEqual(dict(settings.globals), {})
        self.assertIsNone(settings.source)

    def test_defaults_come_from_default_settings_table(self) -> None:
        with patch.dict(DEFAULT_SETTINGS["bundler"], {"entry": "lib/main.ts", "config_dir": ".rollup"}):
            settings = BundlerSettings.defaults()
        self.assertEqual(settings.entry, "lib/main.ts")
        self.assertEqual(settings.config_dir, ".rollup")
        with self.assertRaises(TypeError):
            BundlerSettings()  # type: ignore[call-arg]

    def test_workspace_file_overrides_defaults(self) -> None:
        path = self.workspace / "bundler.toml"
        path.write_text(
            textwrap.dedent(
                """
                [bundler]
                entry = "lib/main.ts"
                rollup = ["npx", "rollup"]

                [themes]
                output = "dist/themes/index.mjs"

                [globals]
                vue = "Vue"
                """
            ),
            encoding="utf-8",
        )
        settings = load_settings(self.workspace, environ={})
        self.assertEqual(settings.entry, "lib/main.ts")
        self.assertEqual(settings.rollup, ("npx", "rollup"))
        self.assertEqual(settings.themes.output, "dist/themes/index.mjs")
        self.assertEqual(settings.themes.entry, "src/themes/index.ts")
        self.assertEqual(dict(settings.globals), {"vue": "Vue"})
        self.assertEqual(settings.source, path)

    def test_environment_and_explicit_paths(self) -> None:
        (self.workspace / "env.json").write_text('{"bundler": {"entry": "env.ts"}}', encoding="utf-8")
        (self.workspace / "cli.json").write_text('{"bundler": {"entry": "cli.ts"}}', encoding="utf-8")
        environ = {"BUNDLER_CONFIG": "env.json"}
        self.assertEqual(load_settings(self.workspace, environ=environ).entry, "env.ts")
        self.assertEqual(load_settings(self.workspace, "cli.json", environ).entry, "cli.ts")

    def test_missing_explicit_file(self) -> None:
        with self.assertRaises(FileNotFoundError):
            load_settings(self.workspace, "nope.toml", {})

    def test_rejects_empty_rollup_command(self) -> None:
        with self.assertRaises(ValueError):
            BundlerSettings.from_mapping({"bundler": {"rollup": []}})

    def test_builtin_modules_override(self) -> None:
        settings = BundlerSettings.from_mapping({"bundler": {"builtin_modules": ["fs"]}})
        self.assertEqual(settings.builtin_modules, ("fs",))


if __name__ == "__main__":
    unittest.main()
