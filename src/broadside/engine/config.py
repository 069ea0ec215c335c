"""Game configuration helpers."""

from __future__ import annotations

import os
from typing import Any, Dict

from pydantic import BaseModel, field_validator

from .board import FLEET_SIZES
from .ship import MAX_SHIP_SIZE, MIN_SHIP_SIZE

MAX_FLEET_LENGTH = len(FLEET_SIZES)


class GameConfig(BaseModel):
    """Runtime configuration for a game session."""

    rng_seed: int | None = None
    fleet: tuple[int, ...] = FLEET_SIZES

    @field_validator("fleet")
    @classmethod
    def _check_fleet(cls, fleet: tuple[int, ...]) -> tuple[int, ...]:
        if not 1 <= len(fleet) <= MAX_FLEET_LENGTH:
            raise ValueError(f"Fleet must contain between 1 and {MAX_FLEET_LENGTH} ships.")
        for size in fleet:
            if not MIN_SHIP_SIZE <= size <= MAX_SHIP_SIZE:
                raise ValueError(f"Ship size {size} outside {MIN_SHIP_SIZE}..{MAX_SHIP_SIZE}.")
        return tuple(sorted(fleet, reverse=True))

    @classmethod
    def from_env(cls, **overrides: Any) -> "GameConfig":
        """Construct config from ``BROADSIDE_SEED``, letting overrides win."""

        data: Dict[str, Any] = {}
        seed = os.getenv("BROADSIDE_SEED")
        if seed is not None and seed.strip():
            data["rng_seed"] = int(seed)
        data.update(overrides)
        return cls(**data)
