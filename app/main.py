import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import json
from dataclasses import replace
from pathlib import Path

import streamlit as st
import pandas as pd
import numpy as np
import plotly.graph_objects as go

from spendcity.config import Config, MapConfig
from spendcity.domain import EMPTY, ROAD, HOUSE, building_type_for
from spendcity.errors import SpendCityError, PersistedStateCorrupt
from spendcity.identity import StaticIdentity
from spendcity.logger import setup_logger
from spendcity.persistence import state_to_dict
from spendcity.render import CellView, annotation, spent_on
from spendcity.services import MapService

st.set_page_config(page_title="Spend City", layout="wide")
setup_logger(level=Config.LOG_LEVEL)

try:
    base_config = MapConfig.from_env()
except ValueError as e:
    st.error(f"❌ Invalid settings: {e}")
    st.stop()

st.sidebar.markdown("### 👤 Profile")
email = st.sidebar.text_input("E-mail", value=st.session_state.get("email", Config.USER_EMAIL))
st.session_state["email"] = email
seed_text = st.sidebar.text_input("Seed (optional)", value="" if base_config.seed is None else str(base_config.seed))
data_dir = st.sidebar.text_input("Data folder", value=str(base_config.data_dir))

try:
    seed = int(seed_text) if seed_text.strip() else None
except ValueError:
    st.sidebar.error("Seed must be a whole number")
    seed = None

config = replace(base_config, data_dir=Path(data_dir), seed=seed)

if "map_cells" not in st.session_state:
    st.session_state.map_cells = {}

MARKER_COLORS = {
    EMPTY: "#2b2b2b",
    ROAD: "#6e6e6e",
    HOUSE: "#e8c547",
}
PALETTE = ["#d1495b", "#00798c", "#edae49", "#66a182", "#8d96a3", "#a05195", "#f95d6a", "#2f4b7c"]


def collect(view: CellView) -> None:
    st.session_state.map_cells[(view.row, view.col)] = view


def marker_codes(markers) -> dict:
    extra = sorted(m for m in set(markers) if m not in MARKER_COLORS)
    codes = {EMPTY: 0, ROAD: 1, HOUSE: 2}
    for i, m in enumerate(extra):
        codes[m] = 3 + i
    return codes


def grid_figure(state) -> go.Figure:
    markers = [m for _, _, m in state.cells()]
    codes = marker_codes(markers)
    z = np.array([[codes[m] + 0.5 for m in row] for row in state.map_data])

    hover = []
    for r, row in enumerate(state.map_data):
        line = []
        for c, m in enumerate(row):
            view = st.session_state.map_cells.get((r, c))
            if view is not None:
                line.append(annotation(view).replace("\n", "<br>"))
            elif m == ROAD:
                line.append("Road")
            else:
                line.append("Empty lot")
        hover.append(line)

    n = max(codes.values()) + 1
    colors = []
    for m, code in sorted(codes.items(), key=lambda kv: kv[1]):
        color = MARKER_COLORS.get(m) or PALETTE[(code - 3) % len(PALETTE)]
        lo, hi = code / n, (code + 1) / n
        colors += [[lo, color], [hi, color]]

    fig = go.Figure(go.Heatmap(
        z=z,
        text=np.array(state.map_data),
        texttemplate="%{text}",
        customdata=np.array(hover, dtype=object),
        hovertemplate="[%{y}, %{x}]<br>%{customdata}<extra></extra>",
        colorscale=colors,
        zmin=0,
        zmax=n,
        showscale=False,
        xgap=1,
        ygap=1,
    ))
    fig.update_yaxes(autorange="reversed", scaleanchor="x", showticklabels=False)
    fig.update_xaxes(showticklabels=False)
    fig.update_layout(template="plotly_dark", height=700, margin=dict(t=10, b=10, l=10, r=10))
    return fig


service = MapService(config, StaticIdentity(email), renderer=collect)

st.title("🏙 Spend City")

col_build, col_load = st.columns(2)
with col_build:
    if st.button("🏗 Generate map", key="btn_generate"):
        st.session_state.map_cells = {}
        try:
            state, diagnostics = service.build()
            st.session_state.map_state = state
            st.session_state.map_diagnostics = diagnostics
            if diagnostics.failed:
                st.warning(f"{diagnostics.failed} building(s) did not fit on the map")
            else:
                st.success("✅ Map generated and saved")
        except SpendCityError as e:
            st.error(f"❌ {e}")

with col_load:
    recover = st.checkbox("Start fresh if the saved map is corrupt", value=False)
    if st.button("📂 Load saved map", key="btn_load"):
        st.session_state.map_cells = {}
        st.session_state.pop("map_diagnostics", None)
        try:
            state = service.load_previous(recover=recover)
            st.session_state.map_state = state
            for r, c, m in state.occupied():
                collect(CellView(row=r, col=c, marker=m, spent_on=spent_on(m)))
        except PersistedStateCorrupt as e:
            st.error(f"❌ {e}")

state = st.session_state.get("map_state")
if state is None:
    st.info("Generate a map or load the saved one.")
else:
    st.plotly_chart(grid_figure(state), use_container_width=True)

    diagnostics = st.session_state.get("map_diagnostics")
    if diagnostics is not None:
        st.subheader("📊 Spending → buildings")
        df = pd.DataFrame(diagnostics.rows())
        df["building"] = df["category"].map(building_type_for)
        df["total"] = df["total"].map(lambda v: f"£{v:,.2f}")
        st.table(df[["category", "building", "total", "requested", "placed", "shortfall"]])

    k1, k2, k3 = st.columns(3)
    with k1:
        st.metric("House", "placed" if state.house_placed else "missing")
    with k2:
        st.metric("Buildings", len(state.building_locations))
    with k3:
        st.metric("Empty lots", sum(1 for _, _, m in state.cells() if m == EMPTY))

    st.download_button(
        "⬇ Download map state",
        json.dumps(state_to_dict(state), indent=2),
        file_name="map_state.json",
        mime="application/json",
    )
