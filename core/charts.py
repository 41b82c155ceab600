from __future__ import annotations

from typing import Optional

import altair as alt
import pandas as pd

from core.render import Grid, table_frame

alt.data_transformers.disable_max_rows()


def plan_chart(values: Grid) -> Optional[alt.Chart]:
    """Horizontal bar of plan amount per distribuidor, or None when nothing is plottable."""
    df = table_frame(values)
    if df.empty or df.shape[1] < 2:
        return None
    label_col, amount_col = df.columns[0], df.columns[1]
    plot = pd.DataFrame(
        {
            "distribuidor": df[label_col].astype(str),
            "importe": pd.to_numeric(df[amount_col].astype(str).str.replace(r"[^0-9.\-]", "", regex=True), errors="coerce"),
        }
    ).dropna(subset=["importe"])
    plot = plot[plot["distribuidor"].str.strip().str.lower() != "grand total"]
    if plot.empty:
        return None
    return (
        alt.Chart(plot)
        .mark_bar()
        .encode(
            x=alt.X("importe:Q", title="Importe", axis=alt.Axis(format="$,.0f")),
            y=alt.Y("distribuidor:N", sort="-x", title=None),
            tooltip=["distribuidor", alt.Tooltip("importe:Q", format="$,.0f")],
        )
    )
