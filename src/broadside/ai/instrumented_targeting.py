"""Instrumented hunt-and-kill targeting emitting OpenTelemetry data."""

from __future__ import annotations

import time

from broadside.ai.targeting import HuntKillTargeting
from broadside.engine.board import ShotResult
from broadside.telemetry import get_logger, get_tracer, record_game_metric


class InstrumentedHuntKillTargeting(HuntKillTargeting):
    """HuntKillTargeting subclass that wraps each step with traces/metrics/logging."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._logger = get_logger("broadside.ai")
        self._tracer = get_tracer("broadside.ai")

    def step(self) -> list[ShotResult]:
        start = time.perf_counter()
        with self._tracer.start_as_current_span("broadside.ai.step") as span:
            mode = self.mode
            span.set_attribute("mode", mode.value)
            span.set_attribute("hunt_queue", len(self.hunt_queue))
            shots = super().step()

            duration_ms = (time.perf_counter() - start) * 1000
            hits = sum(1 for shot in shots if shot.hit)
            record_game_metric("broadside_ai_steps_total", 1, {"mode": mode.value})
            record_game_metric("broadside_ai_step_latency_ms", duration_ms, {"mode": mode.value})
            for shot in shots:
                record_game_metric(
                    "broadside_ai_shots_total",
                    1,
                    {"mode": mode.value, "result": "hit" if shot.hit else "miss"},
                )
            span.set_attribute("shots", len(shots))
            span.set_attribute("hits", hits)
            self._logger.info(
                "ai step mode=%s shots=%d hits=%d queue=%d",
                mode.value,
                len(shots),
                hits,
                len(self.hunt_queue),
            )
            return shots
