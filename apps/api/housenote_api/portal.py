from __future__ import annotations

import asyncio
import logging

import httpx

from .domain.schemas import PortalRegistration

logger = logging.getLogger("housenote.portal")


class PortalError(RuntimeError):
    pass


def _join_base(base_url: str, path: str) -> str:
    return base_url.rstrip("/") + "/" + path.lstrip("/")


class PortalClient:
    """Announces this service to the directory portal so it can be found and proxied."""

    def __init__(
        self,
        base_url: str,
        registration: PortalRegistration,
        *,
        timeout_s: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url
        self.registration = registration
        self.timeout_s = timeout_s
        self._transport = transport

    async def heartbeat(self) -> None:
        url = _join_base(self.base_url, "/portal/register")
        try:
            async with httpx.AsyncClient(timeout=self.timeout_s, transport=self._transport) as client:
                resp = await client.post(url, json=self.registration.model_dump())
        except Exception as e:
            raise PortalError("portal_request_failed") from e

        if resp.status_code >= 400:
            raise PortalError(f"portal_http_{resp.status_code}")

    async def run(self, interval_s: float, stop: asyncio.Event) -> None:
        while not stop.is_set():
            try:
                await self.heartbeat()
            except PortalError as e:
                logger.warning("portal_heartbeat_failed", extra={"url": self.base_url, "reason": str(e)})
            try:
                await asyncio.wait_for(stop.wait(), timeout=interval_s)
            except asyncio.TimeoutError:
                pass
