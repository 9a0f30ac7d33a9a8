from __future__ import annotations

from contextlib import redirect_stdout
from pathlib import Path
import io
import json
import tempfile
import unittest
from unittest.mock import patch

from core.command_runner import CommandError, CommandResult
from bundler import cli


class CliTests(unittest.TestCase):
    def setUp(self) -> None:
        self.temp_dir = tempfile.TemporaryDirectory()
        self.workspace = Path(self.temp_dir.name)
        (self.workspace / "src" / "themes").mkdir(parents=True)
        (self.workspace / "src" / "index.ts").write_text("export {};\n", encoding="utf-8")
        (self.workspace / "src" / "themes" / "index.ts").write_text("export {};\n", encoding="utf-8")
        (self.workspace / "package.json").write_text(
            json.dumps(
                {
                    "name": "my-lib",
                    "main": "dist/cjs/index.js",
                    "module": "dist/es/index.js",
                    "peerDependencies": {"vue": "^3.2.0"},
                }
            ),
            encoding="utf-8",
        )
        patcher = patch.dict("os.environ", {}, clear=True)
        patcher.start()
        self.addCleanup(patcher.stop)

    def tearDown(self) -> None:
        self.temp_dir.cleanup()

    def _main(self, *argv: str) -> tuple[int, str]:
        with redirect_stdout(io.StringIO()) as buffer:
            code = cli.main(list(argv), workspace=self.workspace)
        return code, buffer.getvalue()

    def test_help(self) -> None:
        code, output = self._main("--help")
        self.assertEqual(code, 0)
        self.assertIn("usage: bundler", output)
        for switch in ("--min", "--closure", "--analyze", "-v, --verbose", "-n, --dry-run", "--config=PATH", "-h, --help"):
            self.assertIn(switch, output)

    def test_config_without_value_is_a_usage_error(self) -> None:
        with patch("core.command_runner.subprocess.run") as run:
            code, output = self._main("es2020", "--config", "build.toml")
        self.assertEqual(code, 2)
        run.assert_not_called()
        self.assertIn("bundler: error: switch '--config' expects a value: --config=VALUE", output)
        self.assertIn("usage: bundler", output)
        self.assertFalse((self.workspace / ".bundler").exists())

    def test_dry_run_lists_rollup_commands(self) -> None:
        code, output = self._main("es2020", "commonjs", "--dry-run")
        self.assertEqual(code, 0)
        lines = [line for line in output.splitlines() if line.startswith("[dry-run]")]
        self.assertEqual(len(lines), 3)
        self.assertIn("rollup es2020", lines[0])
        self.assertIn("node_modules/.bin/rollup --config", lines[0])
        self.assertIn("rollup.themes.config.mjs", lines[2])

    def test_invalid_module_system_exits_zero(self) -> None:
        code, output = self._main("notareal-target")
        self.assertEqual(code, 0)
        self.assertIn("You specified an invalid module system.", output)
        self.assertIn("esnext, es2020, es2015, commonjs, iife, umd", output)
        self.assertFalse((self.workspace / ".bundler").exists())

    def test_missing_entry_point_exits_one(self) -> None:
        (self.workspace / "src" / "index.ts").unlink()
        with patch("core.command_runner.subprocess.run") as run:
            code, output = self._main("es2020")
        self.assertEqual(code, 1)
        run.assert_not_called()
        self.assertIn('The source entry point was set as "src/index.ts" but this was not found!', output)

    def test_missing_manifest_is_a_configuration_failure(self) -> None:
        (self.workspace / "package.json").unlink()
        code, output = self._main("es2020", "-n")
        self.assertEqual(code, 1)
        self.assertIn("the build failed loading its configuration", output)
        self.assertIn("Traceback", output)

    def test_bundling_failure_prints_traceback(self) -> None:
        failure = CommandError(CommandResult(command=["rollup"], returncode=1))
        with patch("core.command_runner.SubprocessCommandRunner.run", side_effect=failure):
            code, output = self._main("es2020")
        self.assertEqual(code, 1)
        self.assertIn("- 👎 the build failed during Rollup bundling", output)
        self.assertIn("Traceback", output)
        self.assertIn("CommandError", output)

    def test_settings_file_from_switch(self) -> None:
        (self.workspace / "build.toml").write_text('[bundler]\nrollup = ["npx", "rollup"]\n', encoding="utf-8")
        code, output = self._main("umd", "-n", "--config=build.toml")
        self.assertEqual(code, 0)
        self.assertIn("npx rollup --config", output)


if __name__ == "__main__":
    unittest.main()
