import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from utils import app_config


class TestAppConfig(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        config_dir = Path(self._tmp.name) / ".recurring_budget"
        self._patches = [
            patch.object(app_config, "CONFIG_DIR", config_dir),
            patch.object(app_config, "CONFIG_FILE", config_dir / "config.json"),
        ]
        for p in self._patches:
            p.start()

    def tearDown(self):
        for p in self._patches:
            p.stop()
        self._tmp.cleanup()

    def test_missing_file_is_empty(self):
        self.assertEqual(app_config.load_config(), {})
        self.assertIsNone(app_config.get_db_folder())
        self.assertIsNone(app_config.get_scan_interval_minutes())

    def test_corrupt_file_is_empty(self):
        app_config.CONFIG_DIR.mkdir(parents=True)
        app_config.CONFIG_FILE.write_text("{not json", encoding="utf-8")
        self.assertEqual(app_config.load_config(), {})

    def test_round_trip(self):
        app_config.set_db_folder("/data/budget")
        app_config.set_scan_interval_minutes(15)
        self.assertEqual(app_config.get_db_folder(), "/data/budget")
        self.assertEqual(app_config.get_scan_interval_minutes(), 15)

        app_config.set_scan_interval_minutes(None)
        app_config.set_db_folder(None)
        self.assertEqual(app_config.load_config(), {})

    def test_bad_interval_ignored(self):
        app_config.save_config({"scan_interval_minutes": "often"})
        self.assertIsNone(app_config.get_scan_interval_minutes())


if __name__ == "__main__":
    unittest.main()
