from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

DEFAULT_THRESHOLD = 0.1


@dataclass(frozen=True)
class Selection:
    selected: Literal["A", "B"]
    reason: str


def select_best(
    result_a: Any,
    confidence_a: float,
    result_b: Any,
    confidence_b: float,
    threshold: float = DEFAULT_THRESHOLD,
) -> Selection:
    """Pick model A or B by confidence.

    B wins only when it leads by more than `threshold`; inside the band,
    ties included, the primary model A is kept. The results themselves are
    not inspected.
    """
    diff = confidence_a - confidence_b

    if diff > threshold:
        return Selection(
            "A", f"Model A higher confidence ({confidence_a:.2f} vs {confidence_b:.2f})"
        )
    if diff < -threshold:
        return Selection(
            "B", f"Model B higher confidence ({confidence_b:.2f} vs {confidence_a:.2f})"
        )
    return Selection(
        "A",
        "Similar confidence, preferring primary model A "
        f"({confidence_a:.2f} vs {confidence_b:.2f})",
    )
