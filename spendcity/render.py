from collections import Counter
from dataclasses import dataclass
from datetime import date
from typing import Callable, Optional

from spendcity.domain import HOUSE, building_type_for
from spendcity.grid import GridState

SPENT_ON: dict[str, str] = {
    "M": "Eating Out",
    "W": "Online Shopping",
    "F": "Shein",
    "N": "Nightlife",
    "T": "Groceries",
    "S": "Retail Shopping",
    "H": "Rent",
    "A": "Activities",
}


@dataclass(frozen=True)
class CellView:
    """What a renderer gets for one occupied cell."""
    row: int
    col: int
    marker: str
    built_date: Optional[str] = None
    spent_on: Optional[str] = None
    spent_amount: Optional[float] = None


def spent_on(marker: str) -> str:
    return SPENT_ON.get(marker, "Misc")


def spend_per_building(state: GridState, totals: dict[str, float]) -> dict[str, float]:
    """Average spend behind each building of a marker: category total / buildings of that marker."""
    per_marker: dict[str, float] = {}
    for category, total in totals.items():
        marker = building_type_for(category)
        per_marker[marker] = per_marker.get(marker, 0.0) + total

    placed = Counter(b.building_type for b in state.building_locations)
    return {m: per_marker[m] / n for m, n in placed.items() if m in per_marker}


def render_cells(
    state: GridState,
    callback: Callable[[CellView], None],
    totals: Optional[dict[str, float]] = None,
    built_date: Optional[str] = None,
) -> int:
    """Call callback once per house or building cell, row by row. Returns the call count.

    Without totals no amounts are attached; built_date defaults to today.
    """
    amounts = spend_per_building(state, totals) if totals else {}
    stamp = built_date or date.today().isoformat()

    calls = 0
    for r, c, marker in state.occupied():
        callback(CellView(
            row=r,
            col=c,
            marker=marker,
            built_date=stamp,
            spent_on=spent_on(marker),
            spent_amount=amounts.get(marker) if marker != HOUSE else None,
        ))
        calls += 1
    return calls


def annotation(view: CellView) -> str:
    lines = [f"Date: {view.built_date or '-'}", f"Spent On: {view.spent_on or spent_on(view.marker)}"]
    if view.spent_amount is not None:
        lines.append(f"Spent: £{view.spent_amount:,.2f}")
    return "\n".join(lines)
