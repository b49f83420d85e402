"""Sampling of recorded executions."""

from __future__ import annotations

import random
from collections.abc import Callable


def random_sampling(sample_rate: float) -> Callable[[], bool]:
    """Return a predicate keeping roughly ``sample_rate`` of the calls.

    Raises ``ValueError`` unless ``0 <= sample_rate <= 1``.
    """
    if not 0 <= sample_rate <= 1:
        raise ValueError(f"Expected sample_rate to be 0 <= x <= 1, received {sample_rate}")

    def should_include() -> bool:
        return random.random() < sample_rate

    return should_include
