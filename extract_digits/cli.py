import argparse
import json
import logging
import os
import sys
import cv2

from .config import DEFAULT_CONFIG, load_config
from .core import find_and_recognize_digits, recognize_digit
from .decision import is_unknown
from .errors import ExtractDigitsError
from .model import load_model


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="extract-digits",
        description="Find and classify handwritten or printed digits in an image.",
    )
    p.add_argument("image", help="input image (jpg/png)")
    p.add_argument("--model", required=True, help="classifier model (.tflite, .keras, .h5, .onnx)")
    p.add_argument("--single", action="store_true", help="treat the whole image as one digit")
    p.add_argument("--config", help="JSON file with pipeline parameters")
    p.add_argument("--threshold", type=float, help="confidence floor (default 0.5)")
    p.add_argument("--scale", type=float, help="working scale for detection (default 0.5)")
    p.add_argument("--out-dir", default="outputs", help="where to write JSON and the annotated image")
    p.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return p


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        return _run(args)
    except (ExtractDigitsError, FileNotFoundError, ValueError) as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return 1


def _run(args) -> int:
    cfg = load_config(args.config) if args.config else DEFAULT_CONFIG
    cfg = cfg.with_overrides(threshold=args.threshold, scale=args.scale)

    img = cv2.imread(args.image, cv2.IMREAD_COLOR)
    if img is None:
        raise FileNotFoundError(f"Cannot read image: {args.image}")

    with load_model(args.model) as model:
        if args.single:
            label = recognize_digit(img, model, cfg)
            print("unknown" if is_unknown(label) else label)
            return 0

        out = find_and_recognize_digits(img, model, cfg)

    os.makedirs(args.out_dir, exist_ok=True)
    base = os.path.splitext(os.path.basename(args.image))[0]
    json_path = os.path.join(args.out_dir, f"{base}.json")
    vis_path = os.path.join(args.out_dir, f"{base}.jpg")

    payload = {
        "digits": out.digits,
        "scale": out.scale,
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
    with open(json_path, "w", encoding="utf-8") as f:
        json.dump(payload, f, ensure_ascii=False, indent=2)
    print(f"[OK] Wrote JSON to: {json_path}")

    from .visualize import draw_labels
    vis = draw_labels(out.annotated, out.results)
    ok = cv2.imwrite(vis_path, vis)
    if not ok:
        raise RuntimeError(f"Failed to write image: {vis_path}")
    print(f"[OK] Wrote visualization to: {vis_path}")

    print(f"[OK] Recognized digits: {out.digits}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
