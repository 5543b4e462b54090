"""
Recognize a local image file with recognize.im

Checks the image against the query image requirements and, unless
--check-only is given, sends it to the recognition endpoint using the
credentials from the environment (.env).

Usage:
    python tools/recognize_image.py photo.jpg [--multi] [--all] [--check-only]
"""

import argparse
import json
import os
import sys

from recognizeim.api.client import RecognizeClient
from recognizeim.api.images import check_image_limits, limits_for, read_image_info
from recognizeim.config.config_manager import get_config
from recognizeim.config.logging_config import setup_logging


def describe_image(data, multi):
    """Print measured image properties next to the mode limits"""
    limits = limits_for(multi)
    try:
        info = read_image_info(data)
    except ValueError as e:
        print(f"❌ {e}")
        return

    print(f"📐 {info.width}x{info.height}px, {info.area:.3f}Mpix, {info.size:.1f}KB")
    print(f"   {limits.mode} mode: <= {limits.max_file_size}KB, >= {limits.min_dimension}px, "
          f"{limits.min_image_area}-{limits.max_image_area}Mpix")


def recognition_succeeded(result):
    """True for a JSON object reporting status 0"""
    return isinstance(result, dict) and str(result.get("status")) == "0"


def main():
    parser = argparse.ArgumentParser(description="Recognize an image with recognize.im")
    parser.add_argument("image", help="Path to a JPEG query image")
    parser.add_argument("--multi", action="store_true", help="Use multi mode")
    parser.add_argument("--all", action="store_true", help="Return all matches")
    parser.add_argument("--check-only", action="store_true", help="Only check image requirements")
    args = parser.parse_args()

    # Console only; the tool leaves no log files behind
    setup_logging({"log_level": os.getenv("LOG_LEVEL", "WARNING"), "log_file": None})

    if not os.path.exists(args.image):
        print(f"❌ Image not found: {args.image}")
        return 1

    with open(args.image, "rb") as f:
        data = f.read()

    describe_image(data, args.multi)
    error = check_image_limits(data, args.multi)
    if error:
        print(f"❌ {error}")
        return 1
    print("✅ Image meets the query image requirements")

    if args.check_only:
        return 0

    with RecognizeClient.from_config(get_config()) as client:
        if client.credentials is None:
            print("❌ Credentials not configured (RECOGNIZE_CLIENT_ID, RECOGNIZE_API_KEY, RECOGNIZE_CLAPI_KEY)")
            return 1
        result, error = client.recognize(data, multi=args.multi, get_all=args.all)

    if error:
        print(f"❌ {error}")
        return 1

    print(json.dumps(result, indent=2))
    return 0 if recognition_succeeded(result) else 1


if __name__ == "__main__":
    sys.exit(main())
