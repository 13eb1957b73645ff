"""
Terranova catalog API gateway.

All outbound HTTP calls to the remote catalog go through this class.
Direct `requests` calls in services or blueprints are FORBIDDEN.

Behaviour:
  - One GET per call, `Accept: application/json`
  - Timeout: CATALOG_API_TIMEOUT seconds (default 5)
  - No retry, no backoff: any failure is reported and the caller falls back
    to the static snapshot
  - Never raises; callers check `GatewayResult.ok`

Testability: pass a mock `session` to CatalogGateway() in tests, or patch
`catalog_gateway.fetch` on the module-level singleton.
"""

from __future__ import annotations

import logging
import time

import requests

logger = logging.getLogger(__name__)

_DEFAULT_TIMEOUT = 5


class GatewayResult:
    """Structured return value from CatalogGateway calls.

    Attributes:
        ok:             True if the call succeeded (HTTP 2xx + JSON body).
        status_code:    HTTP status code (None if network-level failure).
        data:           Parsed JSON response body (dict or list), else None.
        error:          Human-readable error message or None.
        duration_ms:    Round-trip latency in milliseconds.
    """

    def __init__(
        self,
        ok: bool,
        status_code: int | None,
        data: dict | list | None,
        error: str | None,
        duration_ms: int,
    ) -> None:
        self.ok = ok
        self.status_code = status_code
        self.data = data
        self.error = error
        self.duration_ms = duration_ms

    def __repr__(self) -> str:
        return (
            f"GatewayResult(ok={self.ok}, status_code={self.status_code}, "
            f"error={self.error!r}, duration_ms={self.duration_ms})"
        )


class CatalogGateway:
    """Read-only client for the remote catalog API.

    Instantiate once at module level (module-level singleton pattern).

    Usage:
        from semisto.integrations.catalog_gateway import catalog_gateway
        result = catalog_gateway.fetch("/website/labs", base_url=api_url)
        if result.ok:
            labs = result.data
    """

    def __init__(self, session: requests.Session | None = None) -> None:
        # Inject custom session for testing; create real one lazily otherwise.
        self._session: requests.Session | None = session

    @property
    def session(self) -> requests.Session:
        """Return (or lazily create) the requests.Session."""
        if self._session is None:
            self._session = requests.Session()
        return self._session

    def fetch(
        self,
        path: str,
        *,
        base_url: str,
        timeout: float = _DEFAULT_TIMEOUT,
    ) -> GatewayResult:
        """GET ``{base_url}{path}`` and parse the JSON body.

        Args:
            path:      Resource path, e.g. "/website/courses".
            base_url:  API root, e.g. "https://api.semisto.org/api/v1".
            timeout:   Per-request timeout in seconds.

        Returns:
            GatewayResult — always returns (never raises). Callers check .ok.
        """
        url = f"{base_url.rstrip('/')}{path}"
        t0 = time.perf_counter()
        try:
            resp = self.session.get(
                url, headers={"Accept": "application/json"}, timeout=timeout,
            )
        except requests.Timeout:
            logger.warning("Catalog request timed out after %ss url=%s", timeout, url)
            return GatewayResult(
                ok=False,
                status_code=None,
                data=None,
                error=f"Request timed out after {timeout}s",
                duration_ms=int(timeout * 1000),
            )
        except requests.RequestException as exc:
            logger.warning("Catalog network error url=%s error=%s", url, str(exc)[:500])
            return GatewayResult(
                ok=False,
                status_code=None,
                data=None,
                error=str(exc)[:500],
                duration_ms=int((time.perf_counter() - t0) * 1000),
            )

        duration_ms = int((time.perf_counter() - t0) * 1000)

        if not resp.ok:
            logger.warning(
                "Catalog request failed status=%d url=%s", resp.status_code, url,
            )
            return GatewayResult(
                ok=False,
                status_code=resp.status_code,
                data=None,
                error=f"HTTP {resp.status_code}: {resp.text[:500]}",
                duration_ms=duration_ms,
            )

        try:
            data = resp.json()
        except ValueError:
            logger.warning("Catalog response is not valid JSON url=%s", url)
            return GatewayResult(
                ok=False,
                status_code=resp.status_code,
                data=None,
                error="Response body is not valid JSON",
                duration_ms=duration_ms,
            )

        logger.debug("Catalog fetch ok url=%s (%dms)", url, duration_ms)
        return GatewayResult(
            ok=True,
            status_code=resp.status_code,
            data=data,
            error=None,
            duration_ms=duration_ms,
        )


# Module-level singleton — import this instance in services.
# In tests, override via:
#   from semisto.integrations import catalog_gateway as gw_module
#   patch.object(gw_module.catalog_gateway, "fetch", return_value=...)
catalog_gateway = CatalogGateway()
