from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class HealthOut(BaseModel):
    ok: bool = True


class BrowseOut(BaseModel):
    host: str
    timestamp: int
    note: dict[str, Any] = Field(default_factory=dict)


class PortalRegistration(BaseModel):
    service: str
    host: str
    port: int
    paths: list[str] = Field(default_factory=list)
