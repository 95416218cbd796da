import os, json, logging, math
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, List, Optional, Tuple

from Generate.params import Distribution, Params
from Generate.city import Block, Building, City, Color, Road
from Generate.stats import Sampler, check_distribution, resolve
from Generate.constants import (
    VERSION,
    SAMPLE_WORKERS_DEFAULT,
    BUILDING_HEIGHT_DEFAULT,
    ROOF_BASE_COLOR,
    ROOF_TINT_COLOR,
)
from geometry.kernel import Vector2, Vector2i
from solver.grid import partition_grid
from solver.blockface import place_buildings

log = logging.getLogger(__name__)


def emit_params_schema(path: str) -> None:
    """Write the versioned JSON Schema for Params to the given path."""
    schema = Params.model_json_schema()
    # add versioned id
    schema["$id"] = f"urn:city-layout-generator:params:{VERSION}"
    schema["$schema"] = "https://json-schema.org/draft/2020-12/schema"
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(schema, f, indent=2)


@dataclass
class CityPlan:
    """Mutable state owned by one pipeline run until assembly."""

    size: Vector2
    image_size: Vector2i
    roads: List[Road] = field(default_factory=list)
    blocks: List[Block] = field(default_factory=list)


def line_capacity(extent: float, density: Distribution) -> int:
    """Worst-case number of candidates along ``extent`` at the maximum density."""
    return max(1, math.ceil(extent * max(0.0, density.max)) + 1)


def to_pitches(densities: Iterable[float]) -> List[float]:
    # A non-positive density means no further lines on that axis.
    return [1.0 / d if d > 0 else math.inf for d in densities]


def roof_color(tint: float) -> Color:
    t = min(1.0, max(0.0, tint))
    rgb = tuple(
        int(round(base + t * (target - base)))
        for base, target in zip(ROOF_BASE_COLOR[:3], ROOF_TINT_COLOR[:3])
    )
    return rgb + (0xFF,)


def _fan_out(pool: ThreadPoolExecutor, sampler: Sampler,
             wanted: Dict[str, Tuple[Distribution, int]]) -> Dict[str, Future]:
    return {
        key: pool.submit(resolve, dist, count, sampler)
        for key, (dist, count) in wanted.items()
    }


def _fan_in(futures: Dict[str, Future]) -> Dict[str, List[float]]:
    return {key: fut.result() for key, fut in futures.items()}


def check_params(params: Params) -> None:
    """Reject unknown or inverted distributions before any sample is requested."""
    for dist in (
        params.roads.density.x,
        params.roads.density.y,
        params.roads.breadth,
        params.alleys.breadth,
        params.buildings.density.x,
        params.buildings.density.y,
        params.buildings.stepback,
        params.buildings.roof.border,
        params.buildings.roof.tint,
    ):
        check_distribution(dist)


def plan_roads(plan: CityPlan, params: Params, sampler: Sampler, pool: ThreadPoolExecutor) -> CityPlan:
    density = params.roads.density
    n_x = line_capacity(plan.size.x, density.x)
    n_y = line_capacity(plan.size.y, density.y)
    samples = _fan_in(_fan_out(pool, sampler, {
        "x": (density.x, n_x),
        "y": (density.y, n_y),
        "breadth": (params.roads.breadth, n_x + n_y),
    }))

    grid = partition_grid(
        to_pitches(samples["x"]),
        to_pitches(samples["y"]),
        samples["breadth"],
        plan.size.x,
        plan.size.y,
    )
    sidewalk = params.sidewalk.breadth
    plan.roads = [Road(asphalt=line) for line in grid.lines]
    plan.blocks = [Block(footprint=cell, sidewalk_breadth=sidewalk) for cell in grid.cells]
    log.info("Road phase: %d roads, %d blocks from %d/%d candidates", len(plan.roads), len(plan.blocks), n_x, n_y)
    return plan


def _building_requests(block: Block, params: Params) -> Optional[Dict[str, Tuple[Distribution, int]]]:
    interior = block.buildings_boundary()
    if interior.is_empty():
        return None
    cfg = params.buildings
    n_x = line_capacity(interior.width, cfg.density.x)
    n_y = line_capacity(interior.height, cfg.density.y)
    alleys = 2 * n_x + 2 * n_y
    # One more building than alleys on each of the four edges.
    buildings = alleys + 4
    return {
        "x": (cfg.density.x, 2 * n_x),
        "y": (cfg.density.y, 2 * n_y),
        "spacing": (params.alleys.breadth, alleys),
        "stepback": (cfg.stepback, buildings),
        "tint": (cfg.roof.tint, buildings),
        "border": (cfg.roof.border, buildings),
    }


def plan_buildings(plan: CityPlan, params: Params, sampler: Sampler, pool: ThreadPoolExecutor) -> CityPlan:
    pending: List[Optional[Dict[str, Future]]] = []
    for block in plan.blocks:
        wanted = _building_requests(block, params)
        pending.append(_fan_out(pool, sampler, wanted) if wanted else None)

    blocks: List[Block] = []
    total = 0
    for block, futures in zip(plan.blocks, pending):
        if futures is None:
            blocks.append(block)
            continue
        samples = _fan_in(futures)
        placements = place_buildings(
            block.buildings_boundary(),
            to_pitches(samples["x"]),
            to_pitches(samples["y"]),
            samples["spacing"],
            samples["stepback"],
        )
        buildings = tuple(
            Building(
                footprint=p.footprint,
                roof_edge_breadth=border,
                height=BUILDING_HEIGHT_DEFAULT,
                roof_color=roof_color(tint),
            )
            for p, border, tint in zip(placements, samples["border"], samples["tint"])
        )
        total += len(buildings)
        blocks.append(replace(block, buildings=buildings))
    plan.blocks = blocks
    log.info("Building phase: %d buildings across %d blocks", total, len(blocks))
    return plan


def assemble(plan: CityPlan) -> City:
    return City(
        size=plan.size,
        image_size=plan.image_size,
        roads=tuple(plan.roads),
        blocks=tuple(plan.blocks),
    )


def generate_city(params: Params, sampler: Sampler, *, max_workers: int = SAMPLE_WORKERS_DEFAULT) -> City:
    """Run the road phase then the building phase and assemble the city.

    Any failure aborts the run; outstanding sample requests are cancelled and
    nothing partial is returned.
    """
    check_params(params)
    plan = CityPlan(
        size=Vector2(params.city.width, params.city.height),
        image_size=Vector2i(params.image.width, params.image.height),
    )
    pool = ThreadPoolExecutor(max_workers=max(1, max_workers), thread_name_prefix="samples")
    try:
        plan = plan_roads(plan, params, sampler, pool)
        plan = plan_buildings(plan, params, sampler, pool)
    finally:
        pool.shutdown(wait=False, cancel_futures=True)
    return assemble(plan)
