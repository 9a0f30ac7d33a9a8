from __future__ import annotations

from pathlib import Path
import json
import tempfile
import unittest

from bundler.manifest import Manifest, infer_directory, output_path
from bundler.module_systems import CanonicalForm


class ManifestTests(unittest.TestCase):
    def test_from_mapping_reads_entry_points_and_dependencies(self) -> None:
        manifest = Manifest.from_mapping(
            {
                "name": "my-lib",
                "main": "dist/cjs/index.js",
                "module": "dist/es/index.js",
                "types": "dist/types/index.d.ts",
                "peerDependencies": {"vue": "^3.2.0"},
                "optionalDependencies": {"@types/lodash": "*"},
            }
        )
        self.assertEqual(manifest.name, "my-lib")
        self.assertEqual(manifest.main, "dist/cjs/index.js")
        self.assertEqual(manifest.module, "dist/es/index.js")
        self.assertEqual(manifest.typings, "dist/types/index.d.ts")
        self.assertEqual(manifest.peer_dependencies, ("vue",))
        self.assertEqual(manifest.optional_dependencies, ("@types/lodash",))

    def test_typings_takes_precedence_over_types(self) -> None:
        manifest = Manifest.from_mapping({"name": "x", "typings": "lib/a.d.ts", "types": "lib/b.d.ts"})
        self.assertEqual(manifest.typings, "lib/a.d.ts")

    def test_global_name_strips_hyphens(self) -> None:
        self.assertEqual(Manifest(name="my-lib").global_name, "mylib")
        self.assertEqual(Manifest(name="a-b-c").global_name, "abc")

    def test_declaration_dir(self) -> None:
        self.assertEqual(Manifest(name="x", typings="dist/types/index.d.ts").declaration_dir, "dist/types")
        self.assertEqual(Manifest(name="x", typings="lib/index.d.ts").declaration_dir, "lib")
        self.assertEqual(Manifest(name="x").declaration_dir, "dist/types")

    def test_rejects_missing_name(self) -> None:
        with self.assertRaises(ValueError):
            Manifest.from_mapping({"main": "index.js"})

    def test_rejects_dependency_lists(self) -> None:
        with self.assertRaises(TypeError):
            Manifest.from_mapping({"name": "x", "peerDependencies": ["vue"]})

    def test_load_from_package_json(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "package.json"
            path.write_text(json.dumps({"name": "demo", "module": "dist/demo.mjs"}), encoding="utf-8")
            manifest = Manifest.load(path)
        self.assertEqual(manifest.name, "demo")
        self.assertEqual(manifest.module, "dist/demo.mjs")
        self.assertEqual(manifest.path, path)


class OutputPathTests(unittest.TestCase):
    def test_defaults_without_entry_points(self) -> None:
        manifest = Manifest(name="demo")
        for form in CanonicalForm:
            with self.subTest(form=form):
                self.assertEqual(output_path(form, manifest), f"dist/{form.value}/index.js")

    def test_explicit_entry_points_win(self) -> None:
        manifest = Manifest(name="demo", main="lib/index.cjs", module="lib/index.mjs")
        self.assertEqual(output_path(CanonicalForm.ES, manifest), "lib/index.mjs")
        self.assertEqual(output_path(CanonicalForm.CJS, manifest), "lib/index.cjs")
        self.assertEqual(output_path(CanonicalForm.UMD, manifest), "dist/umd/index.js")

    def test_typings_lookup(self) -> None:
        manifest = Manifest(name="demo", typings="types/index.d.ts")
        self.assertEqual(output_path("typings", manifest), "types/index.d.ts")

    def test_infer_directory(self) -> None:
        self.assertEqual(infer_directory("dist/es/index.js"), "dist/es")
        self.assertEqual(infer_directory("index.js"), "")
        self.assertEqual(infer_directory(None), "")
        self.assertEqual(infer_directory(""), "")


if __name__ == "__main__":
    unittest.main()
