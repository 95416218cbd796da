from pydantic import BaseModel, ConfigDict, Field

from Generate.constants import IMAGE_MAX_SIDE


class Distribution(BaseModel):
    """Descriptor resolved into samples by ``Generate.stats.resolve``.

    ``min``/``max`` ordering is checked at resolution time, not here, so a
    constant distribution may carry them in any order.
    """

    model_config = ConfigDict(allow_inf_nan=False)

    distribution: str = "constant"
    min: float = 0.0
    max: float = 0.0
    skew: float = 0.0

    @property
    def kind(self) -> str:
        return self.distribution


def _constant(value: float) -> Distribution:
    return Distribution(distribution="constant", min=value, max=value)


def _uniform(lo: float, hi: float) -> Distribution:
    return Distribution(distribution="uniform", min=lo, max=hi)


class Distribution2(BaseModel):
    x: Distribution
    y: Distribution


class CitySection(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    width: float = Field(default=1000.0, gt=0)
    height: float = Field(default=1000.0, gt=0)


class ImageSection(BaseModel):
    width: int = Field(default=2048, gt=0, le=IMAGE_MAX_SIDE)
    height: int = Field(default=2048, gt=0, le=IMAGE_MAX_SIDE)


class SidewalkSection(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    breadth: float = Field(default=3.0, ge=0)


class RoadSection(BaseModel):
    # Densities are lines per meter; breadths are meters.
    density: Distribution2 = Distribution2(x=_uniform(0.004, 0.01), y=_uniform(0.004, 0.01))
    breadth: Distribution = _uniform(10.0, 20.0)


class AlleySection(BaseModel):
    breadth: Distribution = _uniform(2.0, 5.0)


class RoofSection(BaseModel):
    border: Distribution = _constant(1.0)
    tint: Distribution = _uniform(0.0, 1.0)


class BuildingSection(BaseModel):
    density: Distribution2 = Distribution2(x=_uniform(0.02, 0.05), y=_uniform(0.02, 0.05))
    stepback: Distribution = _uniform(10.0, 30.0)
    roof: RoofSection = RoofSection()


class Params(BaseModel):
    city: CitySection = CitySection()
    image: ImageSection = ImageSection()
    sidewalk: SidewalkSection = SidewalkSection()
    roads: RoadSection = RoadSection()
    alleys: AlleySection = AlleySection()
    buildings: BuildingSection = BuildingSection()
