import os, sys, json, argparse, logging
from pydantic import ValidationError
current_dir = os.path.dirname(os.path.abspath(__file__))
repo_root = os.path.abspath(os.path.join(current_dir, ".."))
if repo_root not in sys.path:
    sys.path.insert(0, repo_root)

from Generate.params import Params
from Generate.orchestrator import generate_city
from Generate.stats import GenerateError, HttpSampler, LocalSampler
from Generate.constants import STATS_URL_DEFAULT, STATS_TIMEOUT_S, SAMPLE_WORKERS_DEFAULT
from render.raster import encode_image, render_city
from render.svg import render_city_svg

log = logging.getLogger(__name__)


def load_params(path):
    if path is None:
        return Params()
    with open(path, "r", encoding="utf-8") as f:
        return Params.model_validate(json.load(f))


def main(argv=None):
    ap = argparse.ArgumentParser(description="Lay out a city and render it to an image")
    ap.add_argument("--params_json", type=str, default=None,
                    help="JSON file with generation parameters; defaults apply when omitted")
    ap.add_argument("--out_prefix", type=str, default="generated_city")
    ap.add_argument("--stats_url", type=str, default=os.environ.get("STATS_URL", STATS_URL_DEFAULT),
                    help="URL of the stats sampling service")
    ap.add_argument("--timeout", type=float, default=STATS_TIMEOUT_S, help="Per-request timeout in seconds")
    ap.add_argument("--offline", action="store_true",
                    help="Draw samples locally instead of calling the stats service")
    ap.add_argument("--seed", type=int, default=None, help="Seed for --offline sampling")
    ap.add_argument("--workers", type=int, default=SAMPLE_WORKERS_DEFAULT,
                    help="Concurrent sample requests per phase")
    ap.add_argument("--format", type=str, default="jpeg", choices=["jpeg", "png"])
    ap.add_argument("--svg", action="store_true", help="Also write an SVG rendering")
    args = ap.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")

    try:
        params = load_params(args.params_json)
    except (OSError, json.JSONDecodeError) as e:
        log.error("Failed to read parameters file %s: %s", args.params_json, e)
        sys.exit(1)
    except ValidationError as e:
        log.error("Invalid parameters in %s: %s", args.params_json, e)
        sys.exit(1)

    if args.offline:
        sampler = LocalSampler(seed=args.seed)
    else:
        sampler = HttpSampler(args.stats_url, timeout=args.timeout)

    try:
        city = generate_city(params, sampler, max_workers=args.workers)
    except GenerateError as e:
        log.error("Generation failed: %s", e)
        sys.exit(1)

    out_dir = os.path.dirname(os.path.abspath(args.out_prefix))
    os.makedirs(out_dir, exist_ok=True)

    ext = "jpg" if args.format == "jpeg" else "png"
    image_path = f"{args.out_prefix}.{ext}"
    with open(image_path, "wb") as f:
        f.write(encode_image(render_city(city), args.format))
    log.info("Saved image to %s", image_path)

    json_path = f"{args.out_prefix}.json"
    with open(json_path, "w", encoding="utf-8") as f:
        json.dump(city.to_dict(), f, indent=2)
    log.info("Saved layout JSON to %s", json_path)

    if args.svg:
        svg_path = f"{args.out_prefix}.svg"
        render_city_svg(city, svg_path)
        log.info("Saved SVG to %s", svg_path)

    return city


if __name__ == "__main__":
    main()
