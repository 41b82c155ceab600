from __future__ import annotations

import asyncio
import logging
from typing import Optional, Protocol

from core.client import RelayClient
from core.config import DashboardRanges
from core.render import DashboardView, build_view

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def notify(self, message: str) -> None: ...

    def alert(self, message: str) -> None: ...


class LoggingNotifier:
    def notify(self, message: str) -> None:
        logger.info(message)

    def alert(self, message: str) -> None:
        logger.error(message)


class DashboardController:
    """Fetch-and-render sequence plus the setup/refresh user actions.

    Overlapping calls are not serialized; each load renders whatever it fetched.
    """

    def __init__(self, client: RelayClient, ranges: DashboardRanges = DashboardRanges(), notifier: Optional[Notifier] = None):
        self.client = client
        self.ranges = ranges
        self.notifier: Notifier = notifier or LoggingNotifier()
        self.view: Optional[DashboardView] = None

    async def load_dashboard(self) -> Optional[DashboardView]:
        try:
            kpi, sin_asignar, pendientes, plan, preparar = await asyncio.gather(
                self.client.fetch_range(self.ranges.kpi),
                self.client.fetch_range(self.ranges.sin_asignar),
                self.client.fetch_range(self.ranges.pendientes_flota),
                self.client.fetch_range(self.ranges.plan),
                self.client.fetch_range(self.ranges.preparar),
            )
        except Exception as exc:
            logger.exception("load_dashboard failed")
            self.notifier.alert(str(exc) or "Error cargando dashboard desde WebApp.")
            return None

        self.view = build_view(
            kpi,
            {
                "sin_asignar": sin_asignar,
                "pendientes_flota": pendientes,
                "plan": plan,
                "preparar": preparar,
            },
        )
        return self.view

    async def setup_from_web(self) -> Optional[DashboardView]:
        try:
            self.notifier.notify("Configurando API…")
            result = await self.client.call("setup_api")
        except Exception as exc:
            logger.exception("setup_api failed")
            self.notifier.alert(f"Setup falló: {exc}")
            return None
        self.notifier.notify(result.get("message") or "API configurada.")
        return await self.load_dashboard()

    async def refresh_from_web(self, silent: bool = False) -> Optional[DashboardView]:
        try:
            if not silent:
                self.notifier.notify("Actualizando API…")
            result = await self.client.call("refresh_api")
            if not silent:
                self.notifier.notify(result.get("message") or "API actualizada.")
        except Exception as exc:
            logger.exception("refresh_api failed")
            if not silent:
                self.notifier.alert(f"Refresh falló: {exc}")
        # render whatever the API sheet currently holds, even after a failed refresh
        return await self.load_dashboard()
