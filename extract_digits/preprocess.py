from typing import Dict
import cv2
import numpy as np


def is_empty(img: np.ndarray) -> bool:
    return img is None or img.ndim < 2 or img.shape[0] == 0 or img.shape[1] == 0


def downscale(img: np.ndarray, scale: float) -> np.ndarray:
    if scale == 1.0:
        return img.copy()
    h, w = img.shape[:2]
    new_w = max(1, int(w * scale))
    new_h = max(1, int(h * scale))
    return cv2.resize(img, (new_w, new_h), interpolation=cv2.INTER_LINEAR)


def to_gray(img: np.ndarray) -> np.ndarray:
    if img.ndim == 2:
        return img
    channels = img.shape[2]
    if channels == 1:
        return img[:, :, 0]
    if channels == 4:
        return cv2.cvtColor(img, cv2.COLOR_BGRA2GRAY)
    return cv2.cvtColor(img, cv2.COLOR_BGR2GRAY)


def to_bgr(img: np.ndarray) -> np.ndarray:
    """Colour copy of img for drawing; BGRA keeps its alpha."""
    if img.ndim == 2:
        return cv2.cvtColor(img, cv2.COLOR_GRAY2BGR)
    if img.shape[2] == 1:
        return cv2.cvtColor(img[:, :, 0], cv2.COLOR_GRAY2BGR)
    return img.copy()


def close_gaps(edges: np.ndarray, k: int = 3) -> np.ndarray:
    """
    Bridge small breaks in digit strokes so one glyph gives one outline.
    """
    kernel = cv2.getStructuringElement(cv2.MORPH_RECT, (k, k))
    return cv2.morphologyEx(edges, cv2.MORPH_CLOSE, kernel)


def build_edge_map(
    img: np.ndarray,
    *,
    blur_ksize: int = 5,
    canny_low: float = 100,
    canny_high: float = 200,
    morph_ksize: int = 3,
) -> Dict[str, np.ndarray]:
    """
    gray -> gaussian blur -> canny -> closing.
    Returns every stage keyed by name; "closed" is the one to trace.
    """
    gray = to_gray(img)
    blurred = cv2.GaussianBlur(gray, (blur_ksize, blur_ksize), 0)
    edges = cv2.Canny(blurred, canny_low, canny_high)
    closed = close_gaps(edges, k=morph_ksize)
    return {"gray": gray, "blurred": blurred, "edges": edges, "closed": closed}
