"""Runtime settings read from the environment.

    SCICALC_ANGLE_UNIT   rad | deg     initial angle mode (default: rad)
    SCICALC_PRECISION    1..17         significant digits in results (default: 10)

CLI options take precedence over both.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from loguru import logger

from scicalc.models import DEFAULT_PRECISION, AngleUnit

# A float carries at most 17 significant decimal digits.
MAX_PRECISION = 17


@dataclass(frozen=True)
class Settings:
    angle_unit: AngleUnit = AngleUnit.RADIANS
    precision: int = DEFAULT_PRECISION

    def override(
        self,
        angle_unit: Optional[AngleUnit] = None,
        precision: Optional[int] = None,
    ) -> Settings:
        """Copy with any non-None argument replacing the stored value."""
        return Settings(
            angle_unit=angle_unit if angle_unit is not None else self.angle_unit,
            precision=precision if precision is not None else self.precision,
        )


def _parse_angle_unit(raw: Optional[str]) -> AngleUnit:
    if not raw:
        return AngleUnit.RADIANS
    try:
        return AngleUnit(raw.strip().lower())
    except ValueError:
        logger.warning(f"Ignoring SCICALC_ANGLE_UNIT={raw!r}; expected 'rad' or 'deg'")
        return AngleUnit.RADIANS


def _parse_precision(raw: Optional[str]) -> int:
    if not raw:
        return DEFAULT_PRECISION
    try:
        value = int(raw)
    except ValueError:
        value = 0
    if not 1 <= value <= MAX_PRECISION:
        logger.warning(f"Ignoring SCICALC_PRECISION={raw!r}; expected 1..{MAX_PRECISION}")
        return DEFAULT_PRECISION
    return value


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """Build Settings from ``env`` (defaults to ``os.environ``).

    Invalid values fall back to the defaults with a warning.
    """
    env = os.environ if env is None else env
    return Settings(
        angle_unit=_parse_angle_unit(env.get("SCICALC_ANGLE_UNIT")),
        precision=_parse_precision(env.get("SCICALC_PRECISION")),
    )
