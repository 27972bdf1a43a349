# =============================================================================
# URL Probe
# =============================================================================
# Lightweight, unauthenticated existence check for delivery URLs.
# =============================================================================

from dataclasses import dataclass
from typing import Optional

import httpx

__all__ = ["ProbeResult", "UrlProbe"]


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of a HEAD request against one URL."""

    url: str
    ok: bool
    status_code: Optional[int] = None
    error: Optional[str] = None


class UrlProbe:
    """Issues HEAD requests; failures are reported, never raised."""

    def __init__(
        self,
        *,
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport, follow_redirects=True)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def head(self, url: str) -> ProbeResult:
        try:
            response = await self._client.head(url)
        except httpx.HTTPError as exc:
            return ProbeResult(url=url, ok=False, error=str(exc) or type(exc).__name__)

        status = response.status_code
        if 200 <= status < 400:
            return ProbeResult(url=url, ok=True, status_code=status)
        return ProbeResult(url=url, ok=False, status_code=status, error=f"HTTP {status}")
