"""Order projected points for label rendering."""

from __future__ import annotations

from typing import List, Sequence

from src.datahub.records import ProjectedPoint


def order_for_render(points: Sequence[ProjectedPoint]) -> List[ProjectedPoint]:
    """
    Sort points by descending rate of forgetting.

    A renderer that draws labels in sequence then paints harder items last, on
    top of easier ones. The sort is stable, so equal `rof` values keep their
    projection order.
    """
    return sorted(points, key=lambda point: -point.rof)
