from __future__ import annotations

import contextlib
import io
import json
import os
import tempfile
import unittest
from unittest.mock import patch

import cv2

from extract_digits import cli

from tests.helpers import RecordingModel, image_with_square, one_hot


class TestCli(unittest.TestCase):
    def setUp(self) -> None:
        self._td = tempfile.TemporaryDirectory()
        self.tmp = self._td.name
        self.image_path = os.path.join(self.tmp, "photo.png")
        cv2.imwrite(self.image_path, image_with_square())

    def tearDown(self) -> None:
        self._td.cleanup()

    def run_cli(self, *args: str, scores=None) -> tuple[int, str]:
        model = RecordingModel(scores or one_hot(9))
        buf = io.StringIO()
        with patch.object(cli, "load_model", return_value=model), contextlib.redirect_stdout(buf):
            code = cli.main(list(args))
        self.assertTrue(model.closed)
        return code, buf.getvalue()

    def test_multi_mode_writes_outputs(self) -> None:
        out_dir = os.path.join(self.tmp, "out")
        code, stdout = self.run_cli(self.image_path, "--model", "m.tflite", "--out-dir", out_dir)
        self.assertEqual(code, 0)
        self.assertIn("[OK] Recognized digits: [9]", stdout)

        with open(os.path.join(out_dir, "photo.json"), encoding="utf-8") as f:
            payload = json.load(f)
        self.assertEqual(payload["digits"], [9])
        self.assertEqual(payload["scale"], 0.5)
        self.assertEqual(len(payload["detections"]), 1)
        self.assertIsNotNone(cv2.imread(os.path.join(out_dir, "photo.jpg")))

    def test_single_mode_prints_label(self) -> None:
        code, stdout = self.run_cli(self.image_path, "--model", "m.tflite", "--single")
        self.assertEqual(code, 0)
        self.assertEqual(stdout.strip(), "9")

    def test_single_mode_unknown(self) -> None:
        code, stdout = self.run_cli(self.image_path, "--model", "m.tflite", "--single", scores=[0.3] * 10)
        self.assertEqual(code, 0)
        self.assertEqual(stdout.strip(), "unknown")

    def test_unreadable_image(self) -> None:
        err = io.StringIO()
        with contextlib.redirect_stderr(err):
            code = cli.main([os.path.join(self.tmp, "missing.png"), "--model", "m.tflite"])
        self.assertEqual(code, 1)
        self.assertIn("Cannot read image", err.getvalue())

    def test_bad_model_path(self) -> None:
        err = io.StringIO()
        with contextlib.redirect_stderr(err):
            code = cli.main([self.image_path, "--model", os.path.join(self.tmp, "nope.tflite")])
        self.assertEqual(code, 1)
        self.assertIn("Model file not found", err.getvalue())


if __name__ == "__main__":
    unittest.main()
