from __future__ import annotations

from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class RelayRequestModel(BaseModel):
    model_config = ConfigDict(extra="allow")

    action: str = ""
    # coerced by the scheduler; non-numeric values fall back to the default interval
    minutes: Optional[Any] = None
    range: Optional[str] = None


class RelayResponseModel(BaseModel):
    status: Literal["success", "error"]
    message: Optional[str] = None
    values: Optional[List[List[str]]] = Field(default=None)
