import json
import logging
import math
from collections import defaultdict
from pathlib import Path
from typing import Sequence, Tuple

from spendcity.domain import SpendingEntry
from spendcity.errors import EmptyInput, SpendingParseError

logger = logging.getLogger(__name__)


def _entry_from_item(item, index: int, path: Path | None) -> SpendingEntry:
    if not isinstance(item, dict):
        raise SpendingParseError(path, f"entry {index} is not an object")

    category = item.get("category")
    if not isinstance(category, str) or not category:
        raise SpendingParseError(path, f"entry {index} has no category")

    amount = item.get("amount")
    if isinstance(amount, bool) or not isinstance(amount, (int, float)):
        raise SpendingParseError(path, f"entry {index} has a non-numeric amount: {amount!r}")
    if not math.isfinite(amount):
        raise SpendingParseError(path, f"entry {index} has a non-finite amount")

    date = item.get("date", "")
    if date is None:
        date = ""
    if not isinstance(date, str):
        raise SpendingParseError(path, f"entry {index} has a non-string date: {date!r}")

    return SpendingEntry(date=date, category=category, amount=float(amount))


def parse_spending(raw: str, path: Path | None = None) -> Tuple[SpendingEntry, ...]:
    """Parse a spending document: a bare JSON array of {date, category, amount} objects."""
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise SpendingParseError(path, f"not valid JSON ({e})") from e

    if not isinstance(data, list):
        raise SpendingParseError(path, "top level must be a JSON array of entries")

    return tuple(_entry_from_item(item, i, path) for i, item in enumerate(data))


def load_spending(path: str | Path) -> Tuple[SpendingEntry, ...]:
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = f.read()
    except OSError as e:
        raise SpendingParseError(path, f"could not read file ({e})") from e

    entries = parse_spending(raw, path)
    logger.info("Loaded %d spending entries from %s", len(entries), path)
    return entries


def aggregate(entries: Sequence[SpendingEntry]) -> dict[str, float]:
    """Sum amounts per category code. Codes and signs are taken as given."""
    if not entries:
        raise EmptyInput()

    totals: dict[str, float] = defaultdict(float)
    for e in entries:
        totals[e.category] += e.amount
    return dict(totals)
