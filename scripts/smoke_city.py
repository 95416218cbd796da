import sys
from pathlib import Path

# Ensure repo root is on sys.path so we can import top-level packages like 'Generate'
REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT))

from Generate.params import Params
from Generate.orchestrator import generate_city
from Generate.stats import LocalSampler


def check_city(city):
    """Return a list of layout problems; empty when the city is consistent."""
    issues = []
    total = 0.0
    for road in city.roads:
        total += road.asphalt.area()
    for block in city.blocks:
        total += block.footprint.area()
        inner = block.buildings_boundary()
        for b in block.buildings:
            x0, y0, x1, y1 = b.footprint.bounds
            ix0, iy0, ix1, iy1 = inner.bounds
            if x0 < ix0 - 1e-6 or y0 < iy0 - 1e-6 or x1 > ix1 + 1e-6 or y1 > iy1 + 1e-6:
                issues.append(f"building {b.footprint!r} leaves block interior {inner!r}")
    expected = city.size.x * city.size.y
    # Crossing roads overlap where they intersect, so coverage can exceed the plane.
    if total < expected - 1e-6:
        issues.append(f"roads and blocks cover {total:.1f} of {expected:.1f} m^2")
    return issues


if __name__ == "__main__":
    seed = int(sys.argv[1]) if len(sys.argv) > 1 else 0
    params = Params.model_validate({"city": {"width": 600, "height": 400}, "image": {"width": 300, "height": 200}})
    city = generate_city(params, LocalSampler(seed=seed))
    issues = check_city(city)
    if issues:
        print("Issues:", "; ".join(issues))
        sys.exit(2)
    print(f"OK: {len(city.roads)} roads, {len(city.blocks)} blocks, {len(city.buildings)} buildings")
