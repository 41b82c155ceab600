import asyncio
from contextlib import contextmanager
from typing import Awaitable, Callable, Optional

import streamlit as st

from core.charts import plan_chart
from core.client import RelayClient
from core.config import config_from_env
from core.dashboard import DashboardController
from core.render import TABLE_TITLES, DashboardView, escape_html, render_kpi_grid, render_table_view, table_frame


# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        """
        <style>
        .app-top-bar {padding: 6px 0 4px;border-bottom: 1px solid #e5e7eb;margin-bottom: 10px;}
        .app-top-bar .breadcrumb {color: #6b7280;font-size: 0.9rem;margin-bottom: 2px;}
        .app-top-bar .page-title {font-size: 1.4rem;font-weight: 700;color: #111827;}
        .card {border: 1px solid #e5e7eb;border-radius: 12px;padding: 16px;background: #ffffff;
               box-shadow: 0 1px 2px rgba(0,0,0,0.04); margin-bottom: 12px;}
        .card-header {display: flex;justify-content: space-between;align-items: center;margin-bottom: 8px;}
        .card-title {font-weight: 600;font-size: 1.0rem;color: #111827;}
        .kpi-grid {display: grid;grid-template-columns: repeat(6, minmax(0, 1fr));gap: 10px;margin-bottom: 8px;}
        .kpi {border: 1px solid #e5e7eb;border-radius: 12px;padding: 12px;background: #f9fafb;}
        .kpi .k {color: #6b7280;font-size: 0.85rem;}
        .kpi .v {font-size: 1.4rem;font-weight: 700;color: #111827;}
        .last-update {color: #6b7280;font-size: 0.85rem;margin-bottom: 12px;}
        table.bonos {width: 100%;border-collapse: collapse;font-size: 0.9rem;}
        table.bonos th {text-align: left;border-bottom: 1px solid #e5e7eb;padding: 4px 6px;}
        table.bonos td {border-bottom: 1px solid #f3f4f6;padding: 4px 6px;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


@contextmanager
def card(title: str, actions: Optional[str] = None):
    container = st.container()
    container.markdown(
        f"""
        <div class="card">
          <div class="card-header">
            <div class="card-title">{title}</div>
            <div class="card-actions">{actions or ""}</div>
          </div>
        """,
        unsafe_allow_html=True,
    )
    body = container.container()
    with body:
        yield body
    container.markdown("</div>", unsafe_allow_html=True)


class StreamlitNotifier:
    def notify(self, message: str) -> None:
        st.toast(message)

    def alert(self, message: str) -> None:
        st.error(message)


def run_action(action: Callable[[DashboardController], Awaitable[Optional[DashboardView]]]) -> None:
    config = config_from_env()

    async def _run() -> Optional[DashboardView]:
        async with RelayClient(config.webapp_url, timeout=config.request_timeout) as client:
            controller = DashboardController(client, config.ranges, StreamlitNotifier())
            return await action(controller)

    view = asyncio.run(_run())
    if view is not None:
        st.session_state["view"] = view


def render_view(view: DashboardView):
    st.markdown(f"<div class='kpi-grid'>{render_kpi_grid(view.kpis)}</div>", unsafe_allow_html=True)
    st.markdown(f"<div class='last-update'>Actualización: {escape_html(view.updated_at)}</div>", unsafe_allow_html=True)

    left, right = st.columns(2)
    slots = {"sin_asignar": left, "pendientes_flota": right, "plan": left, "preparar": right}
    for name, table in view.tables.items():
        with slots.get(name, left):
            grid = [table.columns] + table.rows
            df = table_frame(grid)
            with card(TABLE_TITLES.get(name, name)):
                st.markdown(f"<table class='bonos'>{render_table_view(table)}</table>", unsafe_allow_html=True)
                if not df.empty:
                    st.download_button(
                        "Export CSV",
                        data=df.to_csv(index=False).encode("utf-8"),
                        file_name=f"{name}.csv",
                        mime="text/csv",
                        key=f"export_{name}",
                    )
            if name == "plan":
                chart = plan_chart(grid)
                if chart is not None:
                    st.altair_chart(chart, use_container_width=True)


# ---------- UI setup ----------
st.set_page_config(page_title="Dashboard Bonos", layout="wide")
inject_base_styles()
st.markdown(
    "<div class='app-top-bar'><div class='breadcrumb'>Logística</div><div class='page-title'>Dashboard Bonos</div></div>",
    unsafe_allow_html=True,
)

btn_cols = st.columns([1, 1, 6])
if btn_cols[0].button("Refresh", key="refreshDashboard"):
    run_action(lambda c: c.refresh_from_web())
if btn_cols[1].button("Setup API", key="setupApiBtn"):
    run_action(lambda c: c.setup_from_web())

# first load: refresh the API sheet silently, then render
if not st.session_state.get("_first_load_done"):
    st.session_state["_first_load_done"] = True
    run_action(lambda c: c.refresh_from_web(silent=True))

current = st.session_state.get("view")
if current is None:
    st.info("No hay datos del dashboard todavía. Revisa BONOS_WEBAPP_URL o ejecuta Setup API.")
else:
    render_view(current)
