import logging
from enum import Enum
from typing import List, Optional, Union
import numpy as np

from .config import DEFAULT_CONFIG, PipelineConfig
from .decision import decide, select_class, is_unknown
from .detect import detect_candidates
from .errors import InvalidImageError, ModelNotLoadedError
from .geometry import square_rect, crop
from .model import DigitModel, classify_patch
from .preprocess import is_empty, to_bgr
from .types import PipelineOutput, RecognitionResult
from .visualize import draw_box

logger = logging.getLogger(__name__)


class PipelineMode(str, Enum):
    MULTI = "multi"      # find every digit in the image
    SINGLE = "single"    # the image already is one digit


def _check_image(image: Optional[np.ndarray]) -> None:
    if image is None:
        raise InvalidImageError("No image given")
    if not isinstance(image, np.ndarray):
        raise InvalidImageError(f"Expected a numpy image, got {type(image).__name__}")
    if is_empty(image):
        raise InvalidImageError(f"Image has zero area: shape={image.shape}")
    if image.dtype != np.uint8:
        raise InvalidImageError(f"Expected a uint8 image, got {image.dtype}")
    if image.ndim > 3 or (image.ndim == 3 and image.shape[2] not in (1, 3, 4)):
        raise InvalidImageError(f"Expected gray, BGR or BGRA pixels: shape={image.shape}")


def _check_model(model: Optional[DigitModel]) -> None:
    if model is None or model.closed:
        raise ModelNotLoadedError("No classification model loaded")


def find_and_recognize_digits(
    image: np.ndarray,
    model: Optional[DigitModel],
    config: Optional[PipelineConfig] = None,
    debug: bool = False,
) -> PipelineOutput:
    """
    Detect digit-shaped regions and classify each one.

    Every accepted candidate gets a box on the annotated copy, unknowns
    included; only recognized digits go into results, in contour order.
    Boxes and patches are in the downscaled working image.
    """
    _check_image(image)
    _check_model(model)
    cfg = config or DEFAULT_CONFIG

    working, candidates = detect_candidates(image, cfg, debug=debug)
    annotated = to_bgr(working)

    results: List[RecognitionResult] = []
    for c in candidates:
        rect = square_rect(c.bbox, working.shape)
        patch = crop(working, rect)

        probs = classify_patch(model, patch, cfg.input_size)
        label, score = decide(probs, cfg.threshold)

        draw_box(annotated, rect, cfg.box_color, cfg.box_thickness)
        if is_unknown(label):
            continue
        results.append(RecognitionResult(label=label, bbox=rect, confidence=score))

    logger.debug("Recognized %d digits out of %d candidates", len(results), len(candidates))
    return PipelineOutput(annotated=annotated, results=results, scale=cfg.scale)


def recognize_digit(
    image: np.ndarray,
    model: Optional[DigitModel],
    config: Optional[PipelineConfig] = None,
) -> int:
    """Classify the whole image as one digit; UNKNOWN below the threshold."""
    _check_image(image)
    _check_model(model)
    cfg = config or DEFAULT_CONFIG
    probs = classify_patch(model, image, cfg.input_size)
    return select_class(probs, cfg.threshold)


def run_pipeline(
    image: np.ndarray,
    model: Optional[DigitModel],
    mode: Union[PipelineMode, str] = PipelineMode.MULTI,
    config: Optional[PipelineConfig] = None,
    debug: bool = False,
) -> Union[PipelineOutput, int]:
    mode = PipelineMode(mode)
    if mode is PipelineMode.SINGLE:
        return recognize_digit(image, model, config)
    return find_and_recognize_digits(image, model, config, debug=debug)
