import logging
import random
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Sequence

from spendcity import allocation, persistence
from spendcity.config import MapConfig
from spendcity.domain import SpendingEntry
from spendcity.errors import PersistedStateCorrupt
from spendcity.grid import GridState, new_state
from spendcity.identity import IdentityProvider, SpendingFileResolver
from spendcity.placement import PlacementEngine, PlacementReport
from spendcity.render import CellView, render_cells
from spendcity.transforms import aggregate, load_spending

logger = logging.getLogger(__name__)


@dataclass
class MapDiagnostics:
    totals: Dict[str, float] = field(default_factory=dict)
    counts: Dict[str, int] = field(default_factory=dict)
    placement: PlacementReport = field(default_factory=PlacementReport)

    @property
    def failed(self) -> int:
        return self.placement.failed

    def rows(self) -> list[Dict[str, Any]]:
        """One summary row per category, for tables."""
        return [
            {
                "category": cat,
                "total": self.totals.get(cat, 0.0),
                "requested": self.counts.get(cat, 0),
                "placed": self.placement.placed.get(cat, 0),
                "shortfall": self.placement.shortfall.get(cat, 0),
            }
            for cat in self.counts
        ]


def generate_map(
    entries: Sequence[SpendingEntry],
    config: MapConfig,
    rng: Optional[random.Random] = None,
) -> tuple[GridState, MapDiagnostics]:
    """Build a fresh map from spending entries.

    Aggregation and allocation errors are raised before the grid is touched.
    rng defaults to random.Random(config.seed).
    """
    totals = aggregate(entries)
    counts = allocation.plan(totals, config.map_size)

    engine = PlacementEngine(
        rng=rng if rng is not None else random.Random(config.seed),
        max_attempts=config.max_attempts,
    )
    state = engine.place_house(new_state(config.map_size))
    report = engine.populate(state, counts)

    if report.failed:
        logger.warning("%d building(s) could not be placed", report.failed)
    logger.info(
        "Map generated: %d building(s) across %d categories",
        report.total_placed, len(counts),
    )
    return state, MapDiagnostics(totals=totals, counts=counts, placement=report)


class MapService:
    """Facade that wires the user's spending file to a saved, rendered map.

    identity: provides the current user's e-mail
    resolver: finds the spending file for that user
    renderer: optional callback invoked once per house/building cell after saving
    """

    def __init__(
        self,
        config: MapConfig,
        identity: IdentityProvider,
        resolver: Optional[SpendingFileResolver] = None,
        renderer: Optional[Callable[[CellView], None]] = None,
    ):
        self.config = config
        self.identity = identity
        self.resolver = resolver if resolver is not None else SpendingFileResolver(config.search_dirs)
        self.renderer = renderer

    def load_entries(self) -> tuple[SpendingEntry, ...]:
        user = self.identity.current_user()
        return load_spending(self.resolver.resolve(user))

    def build(self, rng: Optional[random.Random] = None) -> tuple[GridState, MapDiagnostics]:
        entries = self.load_entries()
        state, diagnostics = generate_map(entries, self.config, rng)
        persistence.save_state(state, self.config.state_file)
        if self.renderer is not None:
            render_cells(state, self.renderer, totals=diagnostics.totals)
        return state, diagnostics

    def load_previous(self, recover: bool = False) -> GridState:
        try:
            return persistence.load_state(self.config.state_file, self.config.map_size)
        except PersistedStateCorrupt as e:
            if not recover:
                raise
            logger.warning("%s; starting from a fresh map", e)
            return new_state(self.config.map_size)
