"""Completion percentage of a setup process."""

from collections.abc import Iterable


def compute(steps: Iterable) -> int:
    """Percent of steps completed, rounded half up.

    Optional steps count toward the total like any other step, so a
    process only reads 100 once every step has been saved or skipped.
    Accepts anything with an ``is_completed`` attribute (StepRecord).
    """
    steps = list(steps)
    if not steps:
        return 0
    done = sum(1 for s in steps if s.is_completed)
    total = len(steps)
    # Integer round-half-up of 100 * done / total
    return (200 * done + total) // (2 * total)
