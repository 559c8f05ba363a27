from __future__ import annotations

from typing import List

import cv2
import numpy as np

from extract_digits.model import CallableDigitModel


def blank_image(h: int = 200, w: int = 200) -> np.ndarray:
    return np.full((h, w, 3), 255, dtype=np.uint8)


def image_with_square(h: int = 200, w: int = 200, x: int = 80, y: int = 80, side: int = 40) -> np.ndarray:
    img = blank_image(h, w)
    cv2.rectangle(img, (x, y), (x + side - 1, y + side - 1), (0, 0, 0), -1)
    return img


def one_hot(index: int, value: float = 0.9) -> List[float]:
    scores = [0.01] * 10
    scores[index] = value
    return scores


class RecordingModel(CallableDigitModel):
    """Returns fixed scores and keeps every tensor it was called with."""

    def __init__(self, scores: List[float]) -> None:
        self.calls: List[np.ndarray] = []

        def fn(tensor: np.ndarray) -> List[float]:
            self.calls.append(tensor.copy())
            return scores

        super().__init__(fn)
