"""Resolve distribution descriptors into lists of samples.

Constant distributions are expanded locally. Uniform and normal
distributions are delegated to a sampler: either the remote stats service
(``HttpSampler``) or an in-process generator (``LocalSampler``) for offline
use. Samplers keep no per-call state and may be shared by concurrent callers.
"""
from __future__ import annotations

import logging
import random
import threading
from typing import List, Optional, Protocol

import requests
from pydantic import BaseModel, ConfigDict, ValidationError
from requests.exceptions import RequestException

from Generate.constants import DISTRIBUTIONS, STATS_TIMEOUT_S, STATS_URL_DEFAULT, USER_AGENT
from Generate.params import Distribution

log = logging.getLogger(__name__)


class GenerateError(Exception):
    """Base class for failures that abort a generation request."""


class UnknownDistribution(GenerateError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown distribution '{name}', expected one of: {', '.join(DISTRIBUTIONS)}")
        self.name = name


class DistributionInverted(GenerateError):
    def __init__(self, min: float, max: float) -> None:
        super().__init__(f"Distribution minimum {min} is greater than its maximum {max}")
        self.min = min
        self.max = max


class StatsRequestError(GenerateError):
    """The stats service could not produce the requested samples."""


class NetworkError(StatsRequestError):
    pass


class MalformedResponse(StatsRequestError):
    pass


class Sampler(Protocol):
    def sample(self, distribution: Distribution, multiplicity: int) -> List[float]:
        ...


class SampleResponse(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    data: List[float]


def build_payload(distribution: Distribution, multiplicity: int) -> dict:
    return {
        "distribution": distribution.distribution,
        "params": {
            "skew": distribution.skew,
            "min": distribution.min,
            "max": distribution.max,
        },
        "multiplicity": int(multiplicity),
    }


class HttpSampler:
    """Client for the remote stats service."""

    def __init__(
        self,
        url: str = STATS_URL_DEFAULT,
        timeout: float = STATS_TIMEOUT_S,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self._session = session

    def sample(self, distribution: Distribution, multiplicity: int) -> List[float]:
        payload = build_payload(distribution, multiplicity)
        poster = self._session.post if self._session is not None else requests.post
        try:
            resp = poster(
                self.url,
                json=payload,
                headers={"User-Agent": USER_AGENT},
                timeout=self.timeout,
            )
            resp.raise_for_status()
        except RequestException as exc:
            # The request URL stays in the log; the raised message never carries it.
            log.warning("Stats request to %s failed: %s", self.url, exc)
            raise NetworkError("Stats service request failed") from exc
        try:
            body = resp.json()
        except ValueError as exc:
            raise MalformedResponse("Stats service reply was not valid JSON") from exc
        try:
            parsed = SampleResponse.model_validate(body)
        except ValidationError as exc:
            raise MalformedResponse("Stats service reply did not contain a list of samples") from exc
        return parsed.data


class LocalSampler:
    """In-process sampler for running without the stats service.

    Normal draws are centred between ``min`` and ``max`` with a standard
    deviation of a sixth of the range, shifted by ``skew`` deviations and
    clamped into ``[min, max]``.
    """

    def __init__(self, seed: Optional[int] = None) -> None:
        self._rng = random.Random(seed)
        self._lock = threading.Lock()

    def sample(self, distribution: Distribution, multiplicity: int) -> List[float]:
        lo, hi = distribution.min, distribution.max
        with self._lock:
            if distribution.kind == "uniform":
                return [self._rng.uniform(lo, hi) for _ in range(multiplicity)]
            if distribution.kind == "normal":
                sd = (hi - lo) / 6.0
                mean = (lo + hi) / 2.0 + distribution.skew * sd
                if sd == 0:
                    return [float(mean)] * multiplicity
                return [min(hi, max(lo, self._rng.gauss(mean, sd))) for _ in range(multiplicity)]
        raise UnknownDistribution(distribution.kind)


def check_distribution(distribution: Distribution) -> None:
    kind = distribution.kind
    if kind == "constant":
        return
    if kind not in DISTRIBUTIONS:
        raise UnknownDistribution(kind)
    if distribution.min > distribution.max:
        raise DistributionInverted(distribution.min, distribution.max)


def resolve(distribution: Distribution, multiplicity: int, sampler: Sampler) -> List[float]:
    """Return exactly ``multiplicity`` samples for ``distribution``."""
    if multiplicity < 0:
        raise ValueError(f"multiplicity must be non-negative, got {multiplicity}")
    check_distribution(distribution)
    kind = distribution.kind
    if kind == "constant":
        return [float(distribution.max)] * multiplicity
    if multiplicity == 0:
        return []
    log.debug("Requesting %d %s samples (min=%s, max=%s)", multiplicity, kind, distribution.min, distribution.max)
    values = sampler.sample(distribution, multiplicity)
    if len(values) != multiplicity:
        raise MalformedResponse(f"Expected {multiplicity} samples, received {len(values)}")
    return [float(v) for v in values]
