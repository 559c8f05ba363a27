from dataclasses import dataclass, field
from typing import List, Optional, Tuple
import numpy as np

Rect = Tuple[int, int, int, int]                 # x,y,w,h

UNKNOWN = -1                                     # label for a rejected classification


@dataclass
class Candidate:
    bbox: Rect                                   # in the detector's (downscaled) space
    area: float                                  # enclosed contour area, not w*h

    contour: Optional[np.ndarray] = None         # contour points

    @property
    def solidity(self) -> float:
        _, _, w, h = self.bbox
        if w <= 0 or h <= 0:
            return 0.0
        return self.area / float(w * h)


@dataclass
class RecognitionResult:
    label: int                                   # 0..9
    bbox: Rect                                   # square rect the patch was cut from
    confidence: float = 0.0                      # top score of the probability vector


@dataclass
class PipelineOutput:
    annotated: np.ndarray
    results: List[RecognitionResult] = field(default_factory=list)
    scale: float = 1.0                           # working image = input * scale

    @property
    def digits(self) -> List[int]:
        return [r.label for r in self.results]

    def to_original(self, bbox: Rect) -> Rect:
        """Map a working-space rectangle back to the caller's resolution."""
        x, y, w, h = bbox
        if self.scale == 1.0:
            return int(x), int(y), int(w), int(h)
        s = self.scale
        return int(round(x / s)), int(round(y / s)), int(round(w / s)), int(round(h / s))
