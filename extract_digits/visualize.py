from typing import Dict, List, Tuple
import matplotlib.pyplot as plt
import numpy as np
import cv2
from .types import Rect, RecognitionResult


def show_stages(
    stages: Dict[str, np.ndarray],
    cols: int = 2,
    figsize: tuple = (10, 8),
    title: str = "Pipeline stages"
):
    names = list(stages.keys())
    n = len(names)
    rows = (n + cols - 1) // cols

    fig, axes = plt.subplots(rows, cols, figsize=figsize)
    axes = np.array(axes).reshape(-1)

    for ax in axes[n:]:
        ax.axis("off")

    for i, name in enumerate(names):
        ax = axes[i]
        ax.imshow(stages[name], cmap="gray")
        ax.set_title(name)
        ax.axis("off")

    fig.suptitle(title, fontsize=14)
    plt.tight_layout()
    plt.show()


def draw_box(
    vis: np.ndarray,
    bbox: Rect,
    color: Tuple[int, int, int] = (0, 0, 255),
    thickness: int = 2,
) -> np.ndarray:
    """Draws in place on vis and returns it."""
    x, y, w, h = bbox
    if vis.ndim == 3 and vis.shape[2] == 4:
        color = (*color, 255)
    cv2.rectangle(vis, (x, y), (x + w, y + h), color, thickness)
    return vis


def draw_labels(image_bgr: np.ndarray, results: List[RecognitionResult]) -> np.ndarray:
    vis = image_bgr.copy()

    for r in results:
        x, y, _, _ = r.bbox
        label = str(r.label)

        (tw, th), _ = cv2.getTextSize(label, cv2.FONT_HERSHEY_SIMPLEX, 0.5, 1)
        y_text = max(th + 4, y - 2)
        cv2.rectangle(vis, (x, y_text - th - 4), (x + tw + 4, y_text), (0, 0, 255), -1)
        cv2.putText(vis, label, (x + 2, y_text - 2), cv2.FONT_HERSHEY_SIMPLEX, 0.5, (255, 255, 255), 1, cv2.LINE_AA)

    return vis
