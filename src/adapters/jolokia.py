"""Management connection over the Jolokia JMX-HTTP bridge.

Every call is a single JSON request POSTed to the agent endpoint. Jolokia
reports remote failures inside the response body (`status` != 200), so the
HTTP status alone is not enough to detect them.
"""

from __future__ import annotations

import logging
from typing import Any, Sequence

import httpx

from adapters.http_client import build_client, build_endpoint_url
from core.config import AppSettings
from core.domain.models import EndpointAddress
from core.errors import ManagementError

logger = logging.getLogger(__name__)


class JolokiaConnection:
    """`ManagementConnection` implementation backed by `httpx.Client`."""

    def __init__(self, url: str, client: httpx.Client) -> None:
        self._url = url
        self._client = client

    @property
    def url(self) -> str:
        return self._url

    def __enter__(self) -> "JolokiaConnection":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def _request(self, payload: dict[str, Any]) -> Any:
        logger.debug("jolokia request: %s", payload)
        try:
            response = self._client.post(self._url, json=payload)
        except httpx.HTTPError as exc:
            raise ManagementError(f"Cannot reach management endpoint {self._url}: {exc}") from exc

        if response.status_code != 200:
            raise ManagementError(
                f"Management endpoint {self._url} answered HTTP {response.status_code}",
                error_type=f"http_{response.status_code}",
            )
        try:
            body = response.json()
        except ValueError as exc:
            raise ManagementError(f"Malformed response from {self._url}") from exc

        if not isinstance(body, dict):
            raise ManagementError(f"Unexpected response shape from {self._url}: {body!r}")
        status = body.get("status")
        if status != 200:
            error_type = body.get("error_type")
            message = body.get("error") or f"remote status {status}"
            raise ManagementError(str(message), error_type=error_type)

        logger.debug("jolokia response: %s", body.get("value"))
        return body.get("value")

    def is_registered(self, object_name: str) -> bool:
        value = self._request({"type": "search", "mbean": object_name})
        return bool(value)

    def create_mbean(self, class_name: str, object_name: str) -> None:
        # The Jolokia protocol exposes read/write/exec/search only.
        raise ManagementError(
            f"Cannot create {object_name} ({class_name}): the Jolokia agent does not "
            "support remote MBean creation; register it on the target first",
            error_type="UnsupportedOperation",
        )

    def invoke(
        self,
        object_name: str,
        operation: str,
        arguments: Sequence[Any] = (),
        signature: Sequence[str] | None = None,
    ) -> Any:
        op = operation
        if signature is not None:
            op = f"{operation}({','.join(signature)})"
        return self._request(
            {"type": "exec", "mbean": object_name, "operation": op, "arguments": list(arguments)}
        )

    def read_attribute(self, object_name: str, attribute: str) -> Any:
        return self._request({"type": "read", "mbean": object_name, "attribute": attribute})


def connect(
    address: EndpointAddress,
    settings: AppSettings | None = None,
    *,
    transport: httpx.BaseTransport | None = None,
) -> JolokiaConnection:
    """Open a management connection to `address`.

    The HTTP client is lazy: no request is sent until the first call.
    """

    settings = settings or AppSettings()
    url = build_endpoint_url(address, settings)
    logger.debug("connecting to %s", url)
    return JolokiaConnection(url, build_client(settings, transport=transport))
