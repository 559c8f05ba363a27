import json
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Mapping, Tuple

DETECT_PARAMS = {
    "scale": 0.5,          # working resolution relative to the input
    "blur_ksize": 5,       # gaussian kernel side
    "canny_low": 100,
    "canny_high": 200,
    "morph_ksize": 3,      # closing kernel side
}

FILTER_THRESH = {
    "min_size": 6,         # px, in the downscaled image
    "min_aspect": 0.5,     # w / h
    "max_aspect": 3.0,
    "min_solidity": 0.4,   # contour area / bbox area
}

CLASSIFIER_PARAMS = {
    "input_size": 32,      # model consumes input_size x input_size grayscale
    "threshold": 0.5,      # confidence floor
}

ANNOTATION = {
    "box_color": (0, 0, 255),   # BGR red
    "box_thickness": 2,
}


@dataclass(frozen=True)
class PipelineConfig:
    scale: float = DETECT_PARAMS["scale"]
    blur_ksize: int = DETECT_PARAMS["blur_ksize"]
    canny_low: float = DETECT_PARAMS["canny_low"]
    canny_high: float = DETECT_PARAMS["canny_high"]
    morph_ksize: int = DETECT_PARAMS["morph_ksize"]

    min_size: int = FILTER_THRESH["min_size"]
    min_aspect: float = FILTER_THRESH["min_aspect"]
    max_aspect: float = FILTER_THRESH["max_aspect"]
    min_solidity: float = FILTER_THRESH["min_solidity"]

    input_size: int = CLASSIFIER_PARAMS["input_size"]
    threshold: float = CLASSIFIER_PARAMS["threshold"]

    box_color: Tuple[int, int, int] = ANNOTATION["box_color"]
    box_thickness: int = ANNOTATION["box_thickness"]

    def __post_init__(self):
        if not self.scale > 0:
            raise ValueError(f"scale must be > 0, got {self.scale}")
        for name in ("blur_ksize", "morph_ksize"):
            k = getattr(self, name)
            if k <= 0 or k % 2 == 0:
                raise ValueError(f"{name} must be a positive odd number, got {k}")
        if self.canny_low > self.canny_high:
            raise ValueError("canny_low must not exceed canny_high")
        if self.min_size < 1:
            raise ValueError(f"min_size must be at least 1, got {self.min_size}")
        if not 0.0 <= self.min_solidity <= 1.0:
            raise ValueError(f"min_solidity must be within [0, 1], got {self.min_solidity}")
        if self.threshold < 0:
            raise ValueError(f"threshold must be >= 0, got {self.threshold}")
        if self.min_aspect > self.max_aspect:
            raise ValueError("min_aspect must not exceed max_aspect")
        if self.input_size <= 0:
            raise ValueError(f"input_size must be positive, got {self.input_size}")
        if self.box_thickness <= 0:
            raise ValueError(f"box_thickness must be positive, got {self.box_thickness}")

    @classmethod
    def from_dict(cls, values: Mapping[str, Any]) -> "PipelineConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise ValueError(f"Unknown config keys: {', '.join(unknown)}")
        kwargs: Dict[str, Any] = dict(values)
        if "box_color" in kwargs:
            kwargs["box_color"] = tuple(int(c) for c in kwargs["box_color"])
        return cls(**kwargs)

    def with_overrides(self, **overrides: Any) -> "PipelineConfig":
        # None means "keep the current value" so CLI flags can pass through
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


DEFAULT_CONFIG = PipelineConfig()


def load_config(path: str) -> PipelineConfig:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Config file must hold a JSON object: {path}")
    return PipelineConfig.from_dict(data)
