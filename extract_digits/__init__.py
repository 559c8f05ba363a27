"""Top-level package interface for extract_digits.

Expose the main API: find_and_recognize_digits, recognize_digit, load_model.
"""
from .config import PipelineConfig, load_config
from .core import PipelineMode, find_and_recognize_digits, recognize_digit, run_pipeline  # re-export
from .errors import ExtractDigitsError, InvalidImageError, ModelLoadError, ModelNotLoadedError, ModelOutputError
from .model import DigitModel, CallableDigitModel, load_model
from .types import UNKNOWN, Candidate, PipelineOutput, RecognitionResult

__all__ = [
    "find_and_recognize_digits",
    "recognize_digit",
    "run_pipeline",
    "PipelineMode",
    "PipelineConfig",
    "load_config",
    "load_model",
    "DigitModel",
    "CallableDigitModel",
    "UNKNOWN",
    "Candidate",
    "PipelineOutput",
    "RecognitionResult",
    "ExtractDigitsError",
    "InvalidImageError",
    "ModelLoadError",
    "ModelNotLoadedError",
    "ModelOutputError",
]
