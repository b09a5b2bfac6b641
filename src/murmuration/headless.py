from __future__ import annotations

import argparse
import csv
import json
import math
import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from .config import SimulationConfig
from .flock import Flock
from .metrics import StepMetrics

_HEADER = [
    "tick",
    "agents",
    "neighbor_links",
    "avg_neighbors",
    "avg_speed",
    "max_speed",
    "outside_domain",
    "tick_ms",
]


def _format_row(metrics: StepMetrics, tick_ms: float) -> list[object]:
    return [
        metrics.tick,
        metrics.agent_count,
        metrics.neighbor_links,
        f"{metrics.average_neighbors:.4f}",
        f"{metrics.average_speed:.4f}",
        f"{metrics.max_speed:.4f}",
        metrics.outside_domain,
        f"{tick_ms:.3f}",
    ]


def _percentile(sorted_values: list[float], percentile: float) -> float:
    if not sorted_values:
        return 0.0
    if len(sorted_values) == 1:
        return float(sorted_values[0])
    pos = (len(sorted_values) - 1) * percentile
    low = int(math.floor(pos))
    high = int(math.ceil(pos))
    if low == high:
        return float(sorted_values[low])
    weight = pos - low
    return float(sorted_values[low] + (sorted_values[high] - sorted_values[low]) * weight)


def _summary_stats(values: list[float]) -> dict[str, float]:
    if not values:
        return {"min": 0.0, "max": 0.0, "avg": 0.0, "p50": 0.0, "p90": 0.0, "p99": 0.0}
    sorted_values = sorted(values)
    return {
        "min": float(sorted_values[0]),
        "max": float(sorted_values[-1]),
        "avg": float(sum(values) / len(values)),
        "p50": _percentile(sorted_values, 0.50),
        "p90": _percentile(sorted_values, 0.90),
        "p99": _percentile(sorted_values, 0.99),
    }


def run_headless(
    steps: int,
    seed: Optional[int],
    log_path: Optional[Path],
    deterministic_log: bool = False,
    config_path: Optional[Path] = None,
    summary_path: Optional[Path] = None,
) -> Flock:
    config = SimulationConfig.from_yaml(config_path) if config_path else SimulationConfig()
    if seed is not None:
        config.seed = seed
    flock = Flock(config)
    flock.initialize()
    logger.info(f"Headless run: {steps} steps, seed {config.seed}, dt {config.time_step:.5f}")

    writer = None
    csv_file = None
    if log_path:
        csv_file = Path(log_path).open("w", newline="")
        writer = csv.writer(csv_file)
        writer.writerow(_HEADER)

    tick_ms_series: list[float] = []
    speed_series: list[float] = []
    neighbor_series: list[float] = []
    outside_series: list[float] = []
    try:
        for tick in range(steps):
            metrics = flock.step(tick)
            tick_ms = 0.0 if deterministic_log else metrics.tick_duration_ms
            tick_ms_series.append(tick_ms)
            speed_series.append(metrics.average_speed)
            neighbor_series.append(metrics.average_neighbors)
            outside_series.append(float(metrics.outside_domain))
            if writer:
                writer.writerow(_format_row(metrics, tick_ms))
    finally:
        if csv_file:
            csv_file.close()

    if summary_path:
        summary = {
            "steps": steps,
            "seed": config.seed,
            "agents": config.agent_count,
            "deterministic_log": deterministic_log,
            "tick_ms": _summary_stats(tick_ms_series),
            "avg_speed": _summary_stats(speed_series),
            "avg_neighbors": _summary_stats(neighbor_series),
            "outside_domain": _summary_stats(outside_series),
        }
        Path(summary_path).write_text(json.dumps(summary, indent=2))
    logger.info(f"Headless run finished after {steps} steps")
    return flock


def main() -> None:
    parser = argparse.ArgumentParser(description="Headless flocking simulation")
    parser.add_argument("--steps", type=int, default=600)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--config", type=Path, default=None, help="YAML simulation config")
    parser.add_argument("--log", type=Path, default=None, help="CSV file to write metrics")
    parser.add_argument("--summary", type=Path, default=None, help="Optional JSON file to write summary stats")
    parser.add_argument(
        "--deterministic-log",
        action="store_true",
        help="Write deterministic CSV (tick_ms is forced to 0.000 so identical seeds match).",
    )
    parser.add_argument("--verbose", action="store_true", help="Log per-step details")
    args = parser.parse_args()
    if not args.verbose:
        logger.remove()
        logger.add(sys.stderr, level="INFO")
    run_headless(
        args.steps,
        args.seed,
        args.log,
        deterministic_log=args.deterministic_log,
        config_path=args.config,
        summary_path=args.summary,
    )


if __name__ == "__main__":
    main()
