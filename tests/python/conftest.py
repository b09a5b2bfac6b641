import os
import sys
from pathlib import Path

import pytest

os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

ROOT = Path(__file__).resolve().parents[2]
src_root = ROOT / "src"
if str(src_root) not in sys.path:
    sys.path.insert(0, str(src_root))

from murmuration.config import SimParams  # noqa: E402


@pytest.fixture
def open_params() -> SimParams:
    """Parameters with a huge domain so the boundary force never fires."""
    return SimParams(
        domain_half_extents=(1e6, 1e6, 1e6),
        nearby_distance=10.0,
        separation_distance=2.0,
        cohesion_strength=1.0,
        separation_strength=1.0,
        alignment_strength=1.0,
        border_force_strength=1.0,
        max_speed=5.0,
        time_scale=1.0,
    )


@pytest.fixture
def log_messages():
    from loguru import logger

    messages: list[str] = []
    handler_id = logger.add(lambda message: messages.append(message.record["message"]), level="DEBUG")
    yield messages
    logger.remove(handler_id)
