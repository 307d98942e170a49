import logging
import math

from spendcity.errors import ZeroTotalSpending

logger = logging.getLogger(__name__)


def round_half_away_from_zero(x: float) -> int:
    return int(math.copysign(math.floor(abs(x) + 0.5), x))


def available_spots(grid_size: int) -> int:
    """Cells left for buildings once the road rows and the house cell are taken."""
    road_rows = grid_size // 2
    return grid_size * grid_size - road_rows * grid_size - 1


def plan(totals: dict[str, float], grid_size: int) -> dict[str, int]:
    """Turn category totals into building counts proportional to spend.

    Every category gets at least one building. Counts are rounded
    independently and are not rescaled to fill the grid exactly, so their
    sum can land a little above or below available_spots(grid_size).
    """
    grand_total = sum(totals.values())
    if not grand_total > 0:
        raise ZeroTotalSpending(grand_total)

    spots = available_spots(grid_size)
    logger.info("Total spending: %.2f, Available spots: %d", grand_total, spots)

    counts: dict[str, int] = {}
    for category, value in totals.items():
        proportion = value / grand_total
        count = round_half_away_from_zero(proportion * spots)
        counts[category] = max(1, count)
        logger.debug(
            "Category %s: %.2f (%.1f%%) -> %d buildings",
            category, value, proportion * 100, counts[category],
        )
    return counts
