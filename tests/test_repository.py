from __future__ import annotations

import json
import tempfile
import unittest
from dataclasses import replace
from pathlib import Path

from badgekit import config
from badgekit.engine.presets import blank_template, from_preset, preset_dict
from badgekit.engine.repository import (
    delete_template,
    import_template,
    list_templates,
    load_template,
    save_template,
)
from badgekit.models import reset_engine


class RepositoryTests(unittest.TestCase):
    def setUp(self) -> None:
        self.temp_dir = tempfile.TemporaryDirectory()
        config.set_out_dir(Path(self.temp_dir.name))
        reset_engine()

    def tearDown(self) -> None:
        self.temp_dir.cleanup()

    def test_save_and_load_round_trip(self) -> None:
        saved = save_template(from_preset("conference", name="Dev Days"))
        self.assertEqual(saved.version, 1)
        self.assertEqual(load_template(saved.id), saved)

    def test_saving_again_bumps_version(self) -> None:
        saved = save_template(blank_template("Staff"))
        renamed = save_template(replace(saved, name="Staff 2025"))
        self.assertEqual(renamed.id, saved.id)
        self.assertEqual(renamed.version, 2)
        self.assertEqual(load_template(saved.id).name, "Staff 2025")

    def test_list_filters_by_kind(self) -> None:
        save_template(from_preset("corporate"))
        save_template(from_preset("concert"))
        self.assertEqual(len(list_templates()), 2)
        tickets = list_templates("ticket")
        self.assertEqual([record.kind for record in tickets], ["ticket"])

    def test_delete_and_missing(self) -> None:
        saved = save_template(blank_template("Temp"))
        delete_template(saved.id)
        with self.assertRaises(LookupError):
            load_template(saved.id)
        with self.assertRaises(LookupError):
            delete_template(saved.id)

    def test_import_from_file(self) -> None:
        data = preset_dict("vip")
        data["id"] = ""
        data["name"] = "VIP Lounge / 2025"
        path = Path(self.temp_dir.name) / "vip.json"
        path.write_text(json.dumps(data), encoding="utf-8")
        saved = import_template(path)
        self.assertEqual(saved.id, "vip-lounge-2025")
        self.assertEqual(len(saved.zones), len(data["zones"]))
        with self.assertRaises(FileNotFoundError):
            import_template(Path(self.temp_dir.name) / "missing.json")


if __name__ == "__main__":
    unittest.main()
