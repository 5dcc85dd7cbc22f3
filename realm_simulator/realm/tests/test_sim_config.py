from __future__ import annotations

import json
import os
from contextlib import contextmanager
from pathlib import Path
from tempfile import TemporaryDirectory
from unittest import mock

from django.test import TestCase

from realm.services import sim_config


class SimConfigTests(TestCase):
    def tearDown(self) -> None:
        sim_config.clear_cache()
        super().tearDown()

    def test_override_path_is_merged_over_defaults(self) -> None:
        payload = {"version": 7, "scheduler": {"tick_interval_seconds": 22}}
        loaded: dict[str, object] | None = None
        with self._temporary_config(payload) as cfg_path:
            with mock.patch.dict(os.environ, {"SIM_CONFIG_PATH": str(cfg_path)}):
                sim_config.clear_cache()
                loaded = sim_config.load_config(force=True)
                costs = sim_config.action_costs()
        self.assertIsNotNone(loaded)
        self.assertEqual(loaded["version"], 7)
        self.assertEqual(loaded["scheduler"]["tick_interval_seconds"], 22)
        self.assertEqual(loaded["scheduler"]["ap_refresh_interval_seconds"], 3600)
        self.assertEqual(costs["found"], 3)

    def test_missing_file_falls_back_to_defaults(self) -> None:
        with TemporaryDirectory() as tmpdir:
            missing = Path(tmpdir) / "absent.toml"
            with mock.patch.dict(os.environ, {"SIM_CONFIG_PATH": str(missing)}):
                sim_config.clear_cache()
                economy = sim_config.economy_settings()
        self.assertEqual(economy["max_action_points"], 10)
        self.assertEqual(economy["starting_resources"]["gold"], 5)

    def test_malformed_file_raises(self) -> None:
        with TemporaryDirectory() as tmpdir:
            cfg_path = Path(tmpdir) / "broken.toml"
            cfg_path.write_text("[scheduler\ntick_interval_seconds = ", encoding="utf-8")
            with mock.patch.dict(os.environ, {"SIM_CONFIG_PATH": str(cfg_path)}):
                sim_config.clear_cache()
                with self.assertRaises(ValueError):
                    sim_config.load_config(force=True)

    def test_fingerprint_tracks_active_payload(self) -> None:
        sim_config.clear_cache()
        config = sim_config.load_config(force=True)
        fingerprint = sim_config.fingerprint()
        self.assertIn("sha1", fingerprint)
        self.assertEqual(fingerprint["version"], config.get("version", 0))
        self.assertTrue(Path(fingerprint["path"]).exists())

    def test_snapshot_includes_costs_and_scheduler(self) -> None:
        sim_config.clear_cache()
        snap = sim_config.snapshot()
        self.assertIn("costs", snap)
        self.assertIn("scheduler", snap)
        self.assertIn("fingerprint", snap)
        self.assertEqual(snap["costs"]["attack"], 2)

    @contextmanager
    def _temporary_config(self, payload: dict) -> Path:
        with TemporaryDirectory() as tmpdir:
            cfg_path = Path(tmpdir) / "test-sim-config.toml"
            body = [f"version = {payload.get('version', 1)}"]
            scheduler = payload.get("scheduler", {})
            if scheduler:
                body.append("\n[scheduler]")
                for key, value in scheduler.items():
                    body.append(f"{key} = {json.dumps(value)}")
            cfg_path.write_text("\n".join(body), encoding="utf-8")
            yield cfg_path
