from typing import List, Tuple
import numpy as np
import cv2

from .types import Rect


def find_contours(mask: np.ndarray) -> List[np.ndarray]:
    contours, _ = cv2.findContours(mask, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE)
    return list(contours)


def bounding_rect(cnt: np.ndarray) -> Rect:
    x, y, w, h = cv2.boundingRect(cnt)
    return int(x), int(y), int(w), int(h)


def contour_area(cnt: np.ndarray) -> float:
    return float(cv2.contourArea(cnt))


def aspect_ratio(bbox: Rect) -> float:
    _, _, w, h = bbox
    if h <= 0:
        return 0.0
    return w / float(h)


def square_rect(bbox: Rect, image_shape: Tuple[int, ...]) -> Rect:
    """
    Grow bbox to a square centred on it, clamped to the image.

    Near the right/bottom border the side that would overflow is cut to fit,
    so the result is not always square there.
    """
    x, y, w, h = bbox
    H, W = image_shape[:2]
    side = max(w, h)
    dx = side - w
    dy = side - h
    new_x = max(0, x - dx // 2)
    new_y = max(0, y - dy // 2)
    new_w = W - new_x if new_x + side > W else side
    new_h = H - new_y if new_y + side > H else side
    return new_x, new_y, max(0, new_w), max(0, new_h)


def crop(img: np.ndarray, bbox: Rect) -> np.ndarray:
    x, y, w, h = bbox
    return img[y : y + h, x : x + w].copy()
