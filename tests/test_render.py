from spendcity.domain import HOUSE, BuildingLocation
from spendcity.grid import new_state
from spendcity.render import CellView, annotation, render_cells, spend_per_building, spent_on


def make_small_map():
    state = new_state(4)
    state.set_cell(2, 2, HOUSE)
    state.house_placed = True
    state.house_location = (2, 2)
    for row, col, marker in [(0, 1, "M"), (0, 3, "M"), (2, 0, "W"), (0, 0, "Q")]:
        state.set_cell(row, col, marker)
        state.building_locations.append(BuildingLocation(row, col, marker))
    state.buildings_placed = True
    return state


def test_render_cells_once_per_occupied_cell():
    state = make_small_map()
    views = []

    calls = render_cells(state, views.append, built_date="2025-05-01")

    assert calls == 5
    assert [(v.row, v.col, v.marker) for v in views] == [
        (0, 0, "Q"), (0, 1, "M"), (0, 3, "M"), (2, 0, "W"), (2, 2, HOUSE),
    ]
    assert all(v.built_date == "2025-05-01" for v in views)
    assert all(v.spent_amount is None for v in views)


def test_render_cells_never_passes_roads_or_empty():
    views = []
    assert render_cells(new_state(6), views.append) == 0
    assert views == []


def test_render_cells_default_date_is_set():
    views = []
    render_cells(make_small_map(), views.append)
    assert all(v.built_date for v in views)


def test_spend_per_building_splits_category_total():
    state = make_small_map()
    amounts = spend_per_building(state, {"EO": 100.0, "OS": 30.0, "GR": 50.0})

    assert amounts == {"M": 50.0, "W": 30.0}


def test_render_cells_with_totals():
    state = make_small_map()
    views = {}
    render_cells(state, lambda v: views.__setitem__((v.row, v.col), v), totals={"EO": 100.0, "Q": 7.0})

    assert views[(0, 1)].spent_amount == 50.0
    assert views[(0, 1)].spent_on == "Eating Out"
    assert views[(0, 0)].spent_amount == 7.0
    assert views[(0, 0)].spent_on == "Misc"
    assert views[(2, 2)].spent_amount is None
    assert views[(2, 2)].spent_on == "Rent"
    assert views[(2, 0)].spent_amount is None


def test_spent_on_labels():
    assert spent_on("W") == "Online Shopping"
    assert spent_on("F") == "Shein"
    assert spent_on("N") == "Nightlife"
    assert spent_on("T") == "Groceries"
    assert spent_on("??") == "Misc"


def test_annotation_text():
    view = CellView(row=0, col=1, marker="M", built_date="2025-05-01", spent_on="Eating Out", spent_amount=1234.5)
    assert annotation(view) == "Date: 2025-05-01\nSpent On: Eating Out\nSpent: £1,234.50"

    bare = CellView(row=0, col=1, marker="T")
    assert annotation(bare) == "Date: -\nSpent On: Groceries"
