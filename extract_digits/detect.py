import logging
from typing import List, Optional, Tuple
import numpy as np

from .config import DEFAULT_CONFIG, PipelineConfig
from .geometry import find_contours, bounding_rect, contour_area, aspect_ratio
from .preprocess import is_empty, downscale, build_edge_map
from .types import Candidate, Rect

logger = logging.getLogger(__name__)


def find_digit_contours(
    image: np.ndarray,
    config: Optional[PipelineConfig] = None,
    debug: bool = False,
) -> Tuple[np.ndarray, List[np.ndarray]]:
    """
    Downscale, edge-detect and trace the outer contours of image.

    Returns (working_image, contours). The working image is the downscaled
    copy the contours are expressed in; contour order is OpenCV's tracing
    order. A zero-area image gives no contours.
    """
    cfg = config or DEFAULT_CONFIG
    if is_empty(image):
        return image, []

    small = downscale(image, cfg.scale)
    stages = build_edge_map(
        small,
        blur_ksize=cfg.blur_ksize,
        canny_low=cfg.canny_low,
        canny_high=cfg.canny_high,
        morph_ksize=cfg.morph_ksize,
    )
    contours = find_contours(stages["closed"])
    logger.debug("Found %d contours on %dx%d working image",
                 len(contours), small.shape[1], small.shape[0])

    if debug:
        from .visualize import show_stages
        show_stages(stages, title="Candidate detection")

    return small, contours


def candidates_from_contours(contours: List[np.ndarray]) -> List[Candidate]:
    return [
        Candidate(bbox=bounding_rect(cnt), area=contour_area(cnt), contour=cnt)
        for cnt in contours
    ]


def is_digit_shape(
    bbox: Rect,
    area: float,
    *,
    min_size: int = 6,
    min_aspect: float = 0.5,
    max_aspect: float = 3.0,
    min_solidity: float = 0.4,
) -> bool:
    _, _, w, h = bbox
    if w < min_size or h < min_size:
        return False

    ar = aspect_ratio(bbox)
    if not (min_aspect <= ar <= max_aspect):
        return False

    solidity = area / float(w * h)
    if solidity < min_solidity:
        return False
    return True


def filter_candidates(
    candidates: List[Candidate],
    config: Optional[PipelineConfig] = None,
) -> List[Candidate]:
    cfg = config or DEFAULT_CONFIG
    out = [
        c for c in candidates
        if is_digit_shape(
            c.bbox,
            c.area,
            min_size=cfg.min_size,
            min_aspect=cfg.min_aspect,
            max_aspect=cfg.max_aspect,
            min_solidity=cfg.min_solidity,
        )
    ]
    logger.debug("Kept %d of %d candidates", len(out), len(candidates))
    return out


def detect_candidates(
    image: np.ndarray,
    config: Optional[PipelineConfig] = None,
    debug: bool = False,
) -> Tuple[np.ndarray, List[Candidate]]:
    """Detector + filter: (working_image, accepted candidates)."""
    small, contours = find_digit_contours(image, config, debug=debug)
    return small, filter_candidates(candidates_from_contours(contours), config)
