import logging
import os
from abc import ABC, abstractmethod
from typing import Callable, Optional, Sequence
import numpy as np
import cv2

from .config import CLASSIFIER_PARAMS
from .errors import InvalidImageError, ModelLoadError, ModelNotLoadedError, ModelOutputError
from .preprocess import is_empty, to_gray

logger = logging.getLogger(__name__)

NUM_CLASSES = 10


def prepare_patch(patch: np.ndarray, size: int = CLASSIFIER_PARAMS["input_size"]) -> np.ndarray:
    """
    Patch -> float32 (size, size) grayscale in [0, 1].
    Order: bilinear resize, grayscale, /255.
    """
    if is_empty(patch):
        raise InvalidImageError("Cannot classify an empty patch")
    resized = cv2.resize(patch, (size, size), interpolation=cv2.INTER_LINEAR)
    gray = to_gray(resized)
    return gray.astype(np.float32) / 255.0


def fit_to_shape(tensor: np.ndarray, shape: Optional[Sequence]) -> np.ndarray:
    """
    Lay a (H, W) tensor out the way a backend declares its input.

    Handles NHWC (1,H,W,1), NCHW (1,1,H,W), NHW (1,H,W) and flat (1,H*W);
    dynamic dims (None, -1, strings) count as "any".
    """
    h, w = tensor.shape[:2]
    rank = len(shape) if shape is not None else 4
    if rank == 4:
        if shape is not None and shape[1] == 1 and shape[-1] != 1:
            return tensor.reshape(1, 1, h, w)
        return tensor.reshape(1, h, w, 1)
    if rank == 3:
        return tensor.reshape(1, h, w)
    if rank == 2:
        return tensor.reshape(1, h * w)
    raise ModelLoadError(f"Unsupported model input rank: {rank}")


class DigitModel(ABC):
    """
    Opaque digit classifier: (H, W) float tensor in [0, 1] -> 10 scores.

    One handle is not assumed safe for concurrent calls; serialize access or
    open one per worker. Close it when done (or use it as a context manager).
    """

    def __init__(self) -> None:
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def predict(self, tensor: np.ndarray) -> np.ndarray:
        if self._closed:
            raise ModelNotLoadedError(f"{type(self).__name__} is closed")
        out = np.asarray(self._predict(tensor), dtype=np.float32).reshape(-1)
        if out.size != NUM_CLASSES:
            raise ModelOutputError(f"Expected {NUM_CLASSES} class scores, got {out.size}")
        return out

    @abstractmethod
    def _predict(self, tensor: np.ndarray) -> np.ndarray:
        raise NotImplementedError

    def close(self) -> None:
        self._closed = True

    def __enter__(self) -> "DigitModel":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


class CallableDigitModel(DigitModel):
    """Wraps any fn(tensor) -> scores."""

    def __init__(self, fn: Callable[[np.ndarray], Sequence[float]]) -> None:
        super().__init__()
        self._fn = fn

    def _predict(self, tensor: np.ndarray) -> np.ndarray:
        return np.asarray(self._fn(tensor))


class TFLiteDigitModel(DigitModel):
    def __init__(self, model_path: str) -> None:
        super().__init__()
        import tensorflow as tf  # type: ignore

        self._interpreter = tf.lite.Interpreter(model_path=model_path)
        self._interpreter.allocate_tensors()
        self._input = self._interpreter.get_input_details()[0]
        self._output = self._interpreter.get_output_details()[0]
        if not np.issubdtype(self._input["dtype"], np.floating):
            # quantized inputs would need the model's own scale/zero point
            raise ModelLoadError(f"Expected a float input tensor, model wants {np.dtype(self._input['dtype']).name}")

    def _predict(self, tensor: np.ndarray) -> np.ndarray:
        x = fit_to_shape(tensor, list(self._input["shape"])).astype(self._input["dtype"])
        self._interpreter.set_tensor(self._input["index"], x)
        self._interpreter.invoke()
        return self._interpreter.get_tensor(self._output["index"])[0]

    def close(self) -> None:
        self._interpreter = None
        super().close()


class KerasDigitModel(DigitModel):
    def __init__(self, model_path: str) -> None:
        super().__init__()
        from tensorflow import keras  # type: ignore

        self._model = keras.models.load_model(model_path, compile=False)
        self._shape = list(self._model.input_shape)

    def _predict(self, tensor: np.ndarray) -> np.ndarray:
        x = fit_to_shape(tensor, self._shape)
        return self._model.predict(x, verbose=0)[0]

    def close(self) -> None:
        self._model = None
        super().close()


class OnnxDigitModel(DigitModel):
    def __init__(self, model_path: str) -> None:
        super().__init__()
        import onnxruntime as ort  # type: ignore

        self._sess = ort.InferenceSession(model_path, providers=["CPUExecutionProvider"])
        inp = self._sess.get_inputs()[0]
        self._input_name = inp.name
        self._shape = list(inp.shape)
        self._output_name = self._sess.get_outputs()[0].name

    def _predict(self, tensor: np.ndarray) -> np.ndarray:
        x = fit_to_shape(tensor, self._shape).astype(np.float32)
        return self._sess.run([self._output_name], {self._input_name: x})[0][0]

    def close(self) -> None:
        self._sess = None
        super().close()


BACKENDS = {
    ".tflite": TFLiteDigitModel,
    ".keras": KerasDigitModel,
    ".h5": KerasDigitModel,
    ".onnx": OnnxDigitModel,
}


def load_model(model_path: str) -> DigitModel:
    """Open a serialized model; the backend is chosen by file suffix."""
    if not os.path.isfile(model_path):
        raise ModelLoadError(f"Model file not found: {model_path}")

    suffix = os.path.splitext(model_path)[1].lower()
    backend = BACKENDS.get(suffix)
    if backend is None:
        raise ModelLoadError(
            f"Unsupported model format '{suffix}'. "
            f"Expected one of: {', '.join(sorted(BACKENDS))}"
        )

    try:
        model = backend(model_path)
    except ModelLoadError:
        raise
    except ImportError as e:
        raise ModelLoadError(
            f"{backend.__name__} needs a runtime that is not installed ({e.name}).\n"
            "Install one of:\n"
            "  - tensorflow   (for .tflite / .keras / .h5)\n"
            "  - onnxruntime  (for .onnx)\n"
        ) from e
    except Exception as e:
        raise ModelLoadError(f"Cannot load model {model_path}: {e}") from e

    logger.info("Loaded %s from %s", backend.__name__, model_path)
    return model


def classify_patch(
    model: Optional[DigitModel],
    patch: np.ndarray,
    size: int = CLASSIFIER_PARAMS["input_size"],
) -> np.ndarray:
    if model is None:
        raise ModelNotLoadedError("No classification model loaded")
    return model.predict(prepare_patch(patch, size))
