import json
import threading

import pytest

from Generate.orchestrator import (
    emit_params_schema,
    generate_city,
    line_capacity,
    roof_color,
    to_pitches,
)
from Generate.params import Distribution, Params
from Generate.stats import DistributionInverted, MalformedResponse, NetworkError, UnknownDistribution
from Generate.constants import ROOF_BASE_COLOR, ROOF_TINT_COLOR
from geometry.kernel import Rectangle


def constant(value):
    return {"distribution": "constant", "min": value, "max": value}


def uniform(lo, hi):
    return {"distribution": "uniform", "min": lo, "max": hi}


def constant_params(**overrides):
    raw = {
        "city": {"width": 100, "height": 100},
        "image": {"width": 100, "height": 100},
        "sidewalk": {"breadth": 2.5},
        "roads": {"density": {"x": constant(0.02), "y": constant(0.02)}, "breadth": constant(10)},
        "alleys": {"breadth": constant(4)},
        "buildings": {
            "density": {"x": constant(0.05), "y": constant(0.05)},
            "stepback": constant(10),
            "roof": {"border": constant(1), "tint": constant(0)},
        },
    }
    raw.update(overrides)
    return Params.model_validate(raw)


class NeverCalled:
    def sample(self, distribution, multiplicity):
        raise AssertionError("sampler should not be called")


class MidpointSampler:
    def __init__(self):
        self.calls = []
        self._lock = threading.Lock()

    def sample(self, distribution, multiplicity):
        with self._lock:
            self.calls.append((distribution.min, distribution.max, multiplicity))
        return [(distribution.min + distribution.max) / 2] * multiplicity


def test_constant_city_layout():
    city = generate_city(constant_params(), NeverCalled())

    assert [r.asphalt for r in city.roads] == [
        Rectangle.from_bounds(45, 0, 55, 100),
        Rectangle.from_bounds(0, 45, 100, 55),
    ]
    assert len(city.blocks) == 4
    first = city.blocks[0]
    assert first.footprint == Rectangle.from_bounds(0, 0, 45, 45)
    assert first.sidewalk_breadth == 2.5
    assert first.buildings_boundary() == Rectangle.from_bounds(2.5, 2.5, 42.5, 42.5)

    # 40m edges with 20m pitch and 4m alleys: spans (0, 18) and (22, 40).
    assert len(first.buildings) == 8
    top = first.buildings[:2]
    assert top[0].footprint == Rectangle.from_bounds(2.5, 2.5, 20.5, 12.5)
    assert top[1].footprint == Rectangle.from_bounds(24.5, 2.5, 42.5, 12.5)
    assert all(b.roof_edge_breadth == 1 for b in first.buildings)
    assert all(b.roof_color == ROOF_BASE_COLOR for b in first.buildings)
    assert len(city.buildings) == 32


def test_city_is_immutable():
    city = generate_city(constant_params(), NeverCalled())
    assert isinstance(city.roads, tuple)
    assert isinstance(city.blocks[0].buildings, tuple)
    with pytest.raises(Exception):
        city.roads = ()


def test_sample_counts_follow_worst_case():
    params = constant_params(
        roads={"density": {"x": uniform(0.01, 0.015), "y": uniform(0.01, 0.025)}, "breadth": uniform(8, 12)},
    )
    sampler = MidpointSampler()
    generate_city(params, sampler)
    counts = sorted(sampler.calls)
    # ceil(100 * 0.015) + 1 = 3 and ceil(100 * 0.025) + 1 = 4
    assert counts == sorted([(0.01, 0.015, 3), (0.01, 0.025, 4), (8, 12, 7)])


def test_road_phase_requests_run_concurrently():
    params = constant_params(
        roads={"density": {"x": uniform(0.01, 0.015), "y": uniform(0.01, 0.025)}, "breadth": uniform(8, 12)},
    )
    barrier = threading.Barrier(3, timeout=5)

    class BarrierSampler(MidpointSampler):
        def sample(self, distribution, multiplicity):
            barrier.wait()
            return super().sample(distribution, multiplicity)

    city = generate_city(params, BarrierSampler(), max_workers=3)
    assert city.roads


def test_failure_aborts_pipeline():
    params = constant_params(alleys={"breadth": uniform(1, 3)})

    class Failing:
        def sample(self, distribution, multiplicity):
            raise NetworkError("Stats service request failed")

    with pytest.raises(NetworkError):
        generate_city(params, Failing())


def test_short_reply_aborts_pipeline():
    params = constant_params(alleys={"breadth": uniform(1, 3)})

    class Short:
        def sample(self, distribution, multiplicity):
            return [2.0]

    with pytest.raises(MalformedResponse):
        generate_city(params, Short())


def test_bad_distributions_fail_before_sampling():
    inverted = constant_params(alleys={"breadth": uniform(10, 2)})
    with pytest.raises(DistributionInverted):
        generate_city(inverted, NeverCalled())

    unknown = constant_params(alleys={"breadth": {"distribution": "cauchy", "min": 0, "max": 1}})
    with pytest.raises(UnknownDistribution):
        generate_city(unknown, NeverCalled())


def test_blocks_without_interior_get_no_buildings():
    params = constant_params(sidewalk={"breadth": 30})
    city = generate_city(params, NeverCalled())
    assert len(city.blocks) == 4
    assert city.buildings == ()


def test_helpers():
    assert line_capacity(100, Distribution(distribution="uniform", min=0, max=0.02)) == 3
    assert line_capacity(100, Distribution(distribution="constant", max=0)) == 1
    assert to_pitches([0.5, 0, -1])[0] == 2.0
    assert to_pitches([0])[0] == float("inf")
    assert roof_color(0) == ROOF_BASE_COLOR
    assert roof_color(1) == ROOF_TINT_COLOR
    assert roof_color(5) == ROOF_TINT_COLOR


def test_emit_params_schema(tmp_path):
    out = tmp_path / "schema" / "params.json"
    emit_params_schema(str(out))
    schema = json.loads(out.read_text())
    assert schema["$id"].startswith("urn:city-layout-generator:params:")
    assert "city" in schema["properties"]
