from __future__ import annotations

import json
import os
import tempfile
import unittest

from extract_digits.config import DEFAULT_CONFIG, PipelineConfig, load_config


class TestPipelineConfig(unittest.TestCase):
    def test_defaults(self) -> None:
        cfg = DEFAULT_CONFIG
        self.assertEqual(cfg.scale, 0.5)
        self.assertEqual(cfg.blur_ksize, 5)
        self.assertEqual((cfg.canny_low, cfg.canny_high), (100, 200))
        self.assertEqual(cfg.morph_ksize, 3)
        self.assertEqual(cfg.min_size, 6)
        self.assertEqual((cfg.min_aspect, cfg.max_aspect), (0.5, 3.0))
        self.assertEqual(cfg.min_solidity, 0.4)
        self.assertEqual(cfg.input_size, 32)
        self.assertEqual(cfg.threshold, 0.5)
        self.assertEqual(cfg.box_thickness, 2)

    def test_invalid_values(self) -> None:
        for bad in (
            {"scale": 0},
            {"blur_ksize": 4},
            {"morph_ksize": -1},
            {"canny_low": 300, "canny_high": 200},
            {"min_aspect": 2.0, "max_aspect": 1.0},
            {"input_size": 0},
            {"min_size": 0},
            {"min_solidity": -0.1},
            {"min_solidity": 1.5},
            {"threshold": -0.5},
        ):
            with self.subTest(bad=bad):
                with self.assertRaises(ValueError):
                    PipelineConfig(**bad)

    def test_from_dict_rejects_unknown_keys(self) -> None:
        with self.assertRaises(ValueError):
            PipelineConfig.from_dict({"scale": 0.5, "sharpen": True})

    def test_from_dict_coerces_box_color(self) -> None:
        cfg = PipelineConfig.from_dict({"box_color": [0, 255, 0]})
        self.assertEqual(cfg.box_color, (0, 255, 0))

    def test_with_overrides_skips_none(self) -> None:
        cfg = DEFAULT_CONFIG.with_overrides(threshold=None, scale=1.0)
        self.assertEqual(cfg.threshold, 0.5)
        self.assertEqual(cfg.scale, 1.0)

    def test_load_config(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            path = os.path.join(td, "cfg.json")
            with open(path, "w", encoding="utf-8") as f:
                json.dump({"threshold": 0.7, "min_solidity": 0.5}, f)
            cfg = load_config(path)
        self.assertEqual(cfg.threshold, 0.7)
        self.assertEqual(cfg.min_solidity, 0.5)
        self.assertEqual(cfg.scale, 0.5)

    def test_load_config_requires_object(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            path = os.path.join(td, "cfg.json")
            with open(path, "w", encoding="utf-8") as f:
                json.dump([1, 2], f)
            with self.assertRaises(ValueError):
                load_config(path)


if __name__ == "__main__":
    unittest.main()
