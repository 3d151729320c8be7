import json
import shutil
import tempfile
import unittest
from pathlib import Path

from statickit.config import (
    ProjectLayout,
    StaticKitConfig,
    load_config,
    normalize_base,
    time_stamp,
)
from statickit.exceptions import ConfigError


class TestConfig(unittest.TestCase):
    def setUp(self):
        self.test_dir = tempfile.mkdtemp()
        self.tmp_path = Path(self.test_dir)

    def tearDown(self):
        shutil.rmtree(self.test_dir)

    def write_json(self, name, data):
        (self.tmp_path / name).write_text(json.dumps(data), encoding="utf-8")

    def test_defaults_without_files(self):
        config = load_config(self.tmp_path)
        self.assertEqual(config.build.base, "public/")
        self.assertEqual(config.build.output, "dist")
        self.assertEqual(config.templates.language, "en")

    def test_base_config_file(self):
        self.write_json("static-kit.config.json", {"build": {"base": "assets", "output": "out"}})
        config = load_config(self.tmp_path)
        self.assertEqual(config.build.base, "assets")
        self.assertEqual(config.build.output, "out")
        self.assertEqual(config.normalized_base, "assets/")

    def test_local_file_overrides_top_level_keys(self):
        self.write_json(
            "static-kit.config.json",
            {"build": {"base": "assets", "output": "out"}, "templates": {"language": "de"}},
        )
        self.write_json("static-kit.local.json", {"build": {"output": "www"}})

        config = load_config(self.tmp_path)
        # Whole "build" section replaced, untouched sections kept
        self.assertEqual(config.build.output, "www")
        self.assertEqual(config.build.base, "public/")
        self.assertEqual(config.templates.language, "de")

    def test_invalid_json_is_ignored(self):
        (self.tmp_path / "static-kit.config.json").write_text("{not json", encoding="utf-8")
        self.write_json("static-kit.local.json", {"templates": {"language": "fr"}})

        with self.assertLogs("statickit.config", level="WARNING") as logs:
            config = load_config(self.tmp_path)

        self.assertEqual(config.templates.language, "fr")
        self.assertIn("invalid JSON", logs.output[0])

    def test_non_object_json_is_ignored(self):
        self.write_json("static-kit.config.json", ["a", "b"])
        with self.assertLogs("statickit.config", level="WARNING"):
            config = load_config(self.tmp_path)
        self.assertEqual(config, StaticKitConfig())

    def test_invalid_values_raise_config_error(self):
        self.write_json("static-kit.config.json", {"build": "nope"})
        with self.assertRaises(ConfigError) as ctx:
            load_config(self.tmp_path)
        self.assertEqual(ctx.exception.path, self.tmp_path / "static-kit.config.json")

    def test_normalize_base(self):
        self.assertEqual(normalize_base(None), "public/")
        self.assertEqual(normalize_base(""), "public/")
        self.assertEqual(normalize_base("  assets "), "assets/")
        self.assertEqual(normalize_base("static/"), "static/")

    def test_time_stamp_is_epoch_seconds(self):
        stamp = time_stamp()
        self.assertEqual(len(stamp), 10)
        self.assertTrue(stamp.isdigit())

    def test_project_layout_from_root(self):
        layout = ProjectLayout.from_root(self.tmp_path)
        root = self.tmp_path.resolve()
        self.assertEqual(layout.root, root)
        self.assertEqual(layout.source_root, root / "src")
        self.assertEqual(layout.pages_dir, root / "src" / "pages")
        self.assertEqual(layout.components_dir, root / "src" / "components")
        self.assertEqual(layout.icons_dir, root / "src" / "icons")
        self.assertEqual(layout.sprite_path, root / "public" / "images" / "sprite.svg")
        self.assertEqual(layout.sprite_url, "/images/sprite.svg")

    def test_project_layout_custom_dirs(self):
        layout = ProjectLayout.from_root(self.tmp_path, pages_dir="site/pages", public_dir="static")
        root = self.tmp_path.resolve()
        self.assertEqual(layout.pages_dir, root / "site" / "pages")
        self.assertEqual(layout.sprite_path, root / "static" / "images" / "sprite.svg")


if __name__ == "__main__":
    unittest.main()
