import base64
import logging
import os
import threading
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional
import cv2
import numpy as np
from fastapi import FastAPI, File, UploadFile, Query, HTTPException, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from .config import DEFAULT_CONFIG
from .core import find_and_recognize_digits, recognize_digit
from .decision import is_unknown
from .errors import InvalidImageError
from .model import DigitModel, load_model

logger = logging.getLogger(__name__)

MODEL_ENV = "EXTRACT_DIGITS_MODEL"

# one model handle, not assumed reentrant
_model_lock = threading.Lock()


@asynccontextmanager
async def lifespan(app: FastAPI):
    opened = None
    path = os.environ.get(MODEL_ENV)
    if getattr(app.state, "model", None) is None and path:
        opened = load_model(path)
        app.state.model = opened
    try:
        yield
    finally:
        if opened is not None:
            opened.close()
            app.state.model = None


app = FastAPI(title="Digit Extract API", version="1.0.0", lifespan=lifespan)
app.state.model = None

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def decode_upload_to_bgr(upload: UploadFile) -> np.ndarray:
    data = upload.file.read()
    if not data:
        raise HTTPException(status_code=400, detail="Empty file.")
    arr = np.frombuffer(data, dtype=np.uint8)
    img = cv2.imdecode(arr, cv2.IMREAD_COLOR)
    if img is None:
        raise HTTPException(status_code=400, detail="Could not decode image. Provide a valid JPG/PNG.")
    return img


def get_model(request: Request) -> DigitModel:
    model: Optional[DigitModel] = getattr(request.app.state, "model", None)
    if model is None or model.closed:
        raise HTTPException(status_code=503, detail=f"No model loaded. Set {MODEL_ENV}.")
    return model


def encode_png(img: np.ndarray) -> str:
    ok, buf = cv2.imencode(".png", img)
    if not ok:
        raise HTTPException(status_code=500, detail="Could not encode annotated image.")
    return base64.b64encode(buf.tobytes()).decode("ascii")


@app.post("/digits")
def digits(
    request: Request,
    file: UploadFile = File(...),
    threshold: Optional[float] = Query(None, ge=0.0, description="Confidence floor, default 0.5"),
    include_image: bool = Query(False, description="Return the annotated image as base64 PNG"),
):
    img = decode_upload_to_bgr(file)
    model = get_model(request)
    cfg = DEFAULT_CONFIG.with_overrides(threshold=threshold)

    try:
        with _model_lock:
            out = find_and_recognize_digits(img, model, cfg)
    except InvalidImageError as e:
        raise HTTPException(status_code=400, detail=str(e))
    logger.info("Recognized digits %s", out.digits)

    payload: Dict[str, Any] = {
        "digits": out.digits,
        "detections": [
            {
                "label": r.label,
                "confidence": r.confidence,
                "bbox": list(r.bbox),
                "bbox_orig": list(out.to_original(r.bbox)),
            }
            for r in out.results
        ],
    }
    if include_image:
        payload["annotated_png"] = encode_png(out.annotated)
    return JSONResponse(payload)


@app.post("/digit")
def digit(request: Request, file: UploadFile = File(...)):
    img = decode_upload_to_bgr(file)
    model = get_model(request)

    try:
        with _model_lock:
            label = recognize_digit(img, model, DEFAULT_CONFIG)
    except InvalidImageError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return JSONResponse({"label": label, "unknown": is_unknown(label)})
