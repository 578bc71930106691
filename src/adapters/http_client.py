"""httpx wrapper.

Why a wrapper:
- Standardizes timeouts, headers and auth for every management request.
- Eases testing: a `transport` can be injected (e.g. `httpx.MockTransport`).
"""

from __future__ import annotations

import httpx

from core.config import AppSettings
from core.domain.models import EndpointAddress


def build_endpoint_url(address: EndpointAddress, settings: AppSettings | None = None) -> str:
    """Full URL of the Jolokia agent for `address`."""

    settings = settings or AppSettings()
    path = settings.jolokia_path
    if not path.startswith("/"):
        path = "/" + path
    return f"{settings.jolokia_scheme}://{address}{path}"


def build_client(
    settings: AppSettings | None = None,
    *,
    transport: httpx.BaseTransport | None = None,
    extra_headers: dict[str, str] | None = None,
) -> httpx.Client:
    """Create an `httpx.Client` with safe defaults.

    Why a builder:
    - Centralizes timeouts/headers so every request behaves the same.
    - Redirects are not followed: a management endpoint never redirects.
    """

    settings = settings or AppSettings()
    headers: dict[str, str] = {
        "User-Agent": settings.user_agent,
        "Accept": "application/json",
        "Content-Type": "application/json",
    }
    if extra_headers:
        headers.update(extra_headers)

    auth: httpx.BasicAuth | None = None
    if settings.jolokia_user:
        auth = httpx.BasicAuth(settings.jolokia_user, settings.jolokia_password or "")

    return httpx.Client(
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        follow_redirects=False,
        headers=headers,
        auth=auth,
        transport=transport,
    )
