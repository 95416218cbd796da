import argparse
import json
import logging
import os
import sys
import time
import requests
from requests.exceptions import RequestException


def main(argv=None):
    parser = argparse.ArgumentParser(description="Generate a city image via the API")
    parser.add_argument(
        "--api",
        default="http://localhost:5000",
        help="Base URL of the city generation API",
    )
    parser.add_argument(
        "--params",
        default=None,
        help="Path to JSON file with generation parameters (server defaults when omitted)",
    )
    parser.add_argument("--outdir", default="generated_cli", help="Directory to save outputs")
    parser.add_argument(
        "--format",
        default="jpeg",
        choices=["jpeg", "png"],
        help="Image format to request",
    )
    parser.add_argument(
        "--timeout", type=float, default=120.0, help="Seconds to wait for the service"
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    log = logging.getLogger(__name__)

    params = {}
    if args.params:
        try:
            with open(args.params, "r", encoding="utf-8") as f:
                params = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            log.error("Failed to read parameters file %s: %s", args.params, e)
            sys.exit(1)

    payload = {"params": params, "format": args.format}
    url = f"{args.api.rstrip('/')}/generate"
    start = time.perf_counter()
    try:
        resp = requests.post(url, json=payload, timeout=args.timeout)
    except RequestException as e:
        log.error("Request to %s failed: %s", url, e)
        sys.exit(1)

    if resp.status_code != 200:
        try:
            message = resp.json().get("error") or resp.text
        except ValueError:
            message = resp.text
        log.error("Generation failed (%s): %s", resp.status_code, message)
        sys.exit(1)

    os.makedirs(args.outdir, exist_ok=True)
    ext = "jpg" if args.format == "jpeg" else "png"
    image_path = os.path.join(args.outdir, f"city.{ext}")
    try:
        with open(image_path, "wb") as f:
            f.write(resp.content)
    except OSError as e:
        log.error("Failed to write image to %s: %s", image_path, e)
        sys.exit(1)

    print(f"Generation time: {time.perf_counter() - start:.2f}s")
    print(f"Saved image to {image_path}")
    return image_path


if __name__ == "__main__":
    main()
