from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional

from .models import Building
from .registry import BuildingRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CalibrationConfig:
    # Two buildings whose real walking separation is known
    from_code: str = "59"
    to_code: str = "11"
    known_meters: float = 350.0

    # Used when calibration is impossible
    fallback_meters_per_unit: float = 900.0
    min_separation: float = 1e-9


class DistanceCalculator:
    """Flat-plane distance: Euclidean distance between normalized coordinates times a scale."""

    def __init__(self, meters_per_unit: float):
        if not meters_per_unit > 0:
            raise ValueError(f"Scale must be positive, got {meters_per_unit!r}")
        self.meters_per_unit = float(meters_per_unit)

    def distance(self, a: Optional[Building], b: Optional[Building]) -> float:
        if a is None or b is None:
            return 0.0
        dx = b.location.x - a.location.x
        dy = b.location.y - a.location.y
        return math.hypot(dx, dy) * self.meters_per_unit

    __call__ = distance


def calibrate_scale(registry: BuildingRegistry, cfg: CalibrationConfig = CalibrationConfig()) -> float:
    """
    meters_per_unit = known_meters / normalized separation of the two reference
    buildings. Falls back to cfg.fallback_meters_per_unit when either building
    is unknown or the two sit on the same spot.
    """
    a = registry.get(cfg.from_code)
    b = registry.get(cfg.to_code)
    if a is None or b is None:
        logger.warning(
            "Calibration buildings %s/%s not found, using %.1f m per unit",
            cfg.from_code, cfg.to_code, cfg.fallback_meters_per_unit,
        )
        return cfg.fallback_meters_per_unit

    separation = math.hypot(b.location.x - a.location.x, b.location.y - a.location.y)
    if separation < cfg.min_separation:
        logger.warning(
            "Calibration buildings %s/%s share a location, using %.1f m per unit",
            cfg.from_code, cfg.to_code, cfg.fallback_meters_per_unit,
        )
        return cfg.fallback_meters_per_unit

    scale = cfg.known_meters / separation
    logger.debug("Calibrated scale: %.2f m per unit", scale)
    return scale


def calibrated_calculator(
    registry: BuildingRegistry, cfg: CalibrationConfig = CalibrationConfig()
) -> DistanceCalculator:
    return DistanceCalculator(calibrate_scale(registry, cfg))
