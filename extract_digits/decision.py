from typing import Sequence, Tuple, Union
import numpy as np

from .types import UNKNOWN


def top_class(probs: Union[Sequence[float], np.ndarray]) -> Tuple[int, float]:
    """(index, value) of the largest score; the first one wins a tie."""
    scores = np.asarray(probs, dtype=np.float64).reshape(-1)
    if scores.size == 0:
        raise ValueError("Empty probability vector")
    idx = int(np.argmax(scores))
    return idx, float(scores[idx])


def decide(probs: Union[Sequence[float], np.ndarray], threshold: float = 0.5) -> Tuple[int, float]:
    """(label, top score); label is UNKNOWN when the score is below threshold."""
    idx, value = top_class(probs)
    return (idx if value >= threshold else UNKNOWN), value


def select_class(probs: Union[Sequence[float], np.ndarray], threshold: float = 0.5) -> int:
    """
    Digit index of the best score, or UNKNOWN when it is below threshold.
    """
    label, _ = decide(probs, threshold)
    return label


def is_unknown(label: int) -> bool:
    return label == UNKNOWN
