"""Wrapping sequence counter arithmetic.

Data frames carry a 15-bit counter. Consecutive frames of one logical file
differ by 1 modulo 32768; a larger delta means frames were lost in between.
"""
from __future__ import annotations

from mvis_core.protocol import COUNTER_LIMIT, COUNTER_MASK, DEFAULT_MAX_GAP


def is_valid_counter(counter: int) -> bool:
    return 0 <= counter < COUNTER_LIMIT


def counter_diff(counter: int, last: int) -> int:
    """Forward distance from ``last`` to ``counter`` in counter space."""
    return (counter - last) & COUNTER_MASK


def missing_between(last: int | None, counter: int, max_gap: int = DEFAULT_MAX_GAP) -> int | None:
    """Number of frames lost between ``last`` and ``counter``.

    Returns 0 for the first frame of a file (``last is None``), for the next
    expected counter and for a duplicate. Returns None when the delta exceeds
    ``max_gap``: the sender reset or went backwards, so no gap can be inferred.
    """
    if last is None:
        return 0
    diff = counter_diff(counter, last)
    if diff > max_gap:
        return None
    return max(diff - 1, 0)
