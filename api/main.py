from __future__ import annotations

import json
import logging
from functools import lru_cache
from typing import Any, Dict, Optional

from fastapi import FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.schemas import RelayRequestModel, RelayResponseModel
from core.builder import ApiBuilder
from core.config import config_from_env
from core.relay import RelayService
from core.sheets import open_google_workbook


app = FastAPI(title="Bonos Dashboard Relay", version="0.1.0")
logger = logging.getLogger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)


@lru_cache(maxsize=1)
def get_relay() -> RelayService:
    config = config_from_env()
    workbook = open_google_workbook(config.spreadsheet_id, config.service_account_file)
    return RelayService(ApiBuilder(workbook, config))


def _json(data: Dict[str, Any]) -> JSONResponse:
    return JSONResponse(content=RelayResponseModel(**data).model_dump(exclude_none=True))


def _error(exc: Exception) -> JSONResponse:
    return JSONResponse(content={"status": "error", "message": str(exc)})


@app.get("/health")
def health():
    return {"status": "success", "message": "ok"}


@app.get("/exec")
def relay_get(
    action: str = Query(default=""),
    minutes: Optional[str] = Query(default=None),
    range_a1: Optional[str] = Query(default=None, alias="range"),
):
    try:
        params: Dict[str, Any] = {"minutes": minutes, "range": range_a1}
        return _json(get_relay().handle(action, params, method="GET"))
    except Exception as exc:
        logger.exception("relay GET %s failed", action)
        return _error(exc)


@app.post("/exec")
async def relay_post(request: Request):
    try:
        raw = await request.body()
        body = json.loads(raw or b"{}")
        if not isinstance(body, dict):
            raise ValueError("El cuerpo debe ser un objeto JSON.")
        payload = RelayRequestModel(**body)
        return _json(get_relay().handle(payload.action, payload.model_dump(), method="POST"))
    except Exception as exc:
        logger.exception("relay POST failed")
        return _error(exc)
