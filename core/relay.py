from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Mapping, Optional

from core.builder import ActionResult, ApiBuilder
from core.triggers import DEFAULT_MINUTES, RefreshScheduler

logger = logging.getLogger(__name__)


class RelayService:
    """Routes relay actions to the API builder and trigger scheduler.

    Always answers with a ``{status, message, values?}`` dict, even on failure.
    """

    def __init__(self, builder: ApiBuilder, scheduler: Optional[RefreshScheduler] = None):
        self.builder = builder
        self.scheduler = scheduler or RefreshScheduler(self._scheduled_refresh)
        self._handlers: Dict[str, Callable[[Mapping[str, Any]], ActionResult]] = {
            "setup_api": lambda p: self.builder.setup_api(),
            "refresh_api": lambda p: self.builder.refresh_api(),
            "install_triggers": self._install_triggers,
            "remove_triggers": lambda p: ActionResult.success(self.scheduler.remove()),
            "get_api": lambda p: self.builder.get_api(str(p.get("range") or "")),
        }

    def handle(self, action: str, params: Optional[Mapping[str, Any]] = None, *, method: str = "GET") -> Dict[str, Any]:
        params = params or {}
        handler = self._handlers.get(action or "")
        if handler is None:
            label = "Acción POST" if method.upper() == "POST" else "Acción"
            return ActionResult.error(f"{label} '{action or ''}' no válida.").to_dict()
        try:
            return handler(params).to_dict()
        except Exception as exc:
            logger.exception("%s failed", action)
            return ActionResult.error(str(exc)).to_dict()

    def _install_triggers(self, params: Mapping[str, Any]) -> ActionResult:
        minutes = params.get("minutes") or self.builder.config.default_trigger_minutes or DEFAULT_MINUTES
        return ActionResult.success(self.scheduler.install(minutes))

    def _scheduled_refresh(self) -> None:
        result = self.builder.refresh_api()
        logger.info("Scheduled refresh: %s", result.message)
