"""HTTP reachability probe."""

from __future__ import annotations

import http.client
import ssl
from typing import Any, Callable
from urllib import error, request

from measurement.base import Probe
from measurement.models import ProbeResult


def _insecure_opener() -> Callable[..., Any]:
    context = ssl.create_default_context()
    context.check_hostname = False
    context.verify_mode = ssl.CERT_NONE
    return request.build_opener(request.HTTPSHandler(context=context)).open


class HTTPAvailability(Probe):
    """GET a fixed URL; 2xx and 3xx responses count as available.

    Certificate validation is disabled because test deployments serve
    self-signed certificates.
    """

    name = "HTTP availability"
    summary_phrase = "perform HTTP GET requests"

    def __init__(
        self,
        url: str,
        *,
        timeout_s: float = 5.0,
        opener: Callable[..., Any] | None = None,
    ) -> None:
        self._url = url
        self._timeout_s = float(timeout_s)
        self._open = opener or _insecure_opener()

    @property
    def url(self) -> str:
        return self._url

    def run(self) -> ProbeResult:
        req = request.Request(self._url, method="GET")
        try:
            with self._open(req, timeout=self._timeout_s) as response:
                status = int(getattr(response, "status", None) or response.getcode())
        except error.HTTPError as exc:
            status = exc.code
        except (error.URLError, http.client.HTTPException, OSError) as exc:
            reason = getattr(exc, "reason", exc)
            return ProbeResult(success=False, message=f"Request to {self._url} failed: {reason}")

        if 200 <= status < 400:
            return ProbeResult(success=True, message=f"Response had status code {status}")
        return ProbeResult(
            success=False,
            message=f"Response had unexpected status code {status}",
        )
