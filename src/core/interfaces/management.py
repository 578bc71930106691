"""Remote management channel contract.

Why Protocol:
- Defines a structural contract (duck typing) without rigid inheritance.
- The lifecycle controller depends on this shape only; the Jolokia adapter
  and the in-memory test double are interchangeable.
"""

from __future__ import annotations

from typing import Any, Protocol, Sequence, runtime_checkable


@runtime_checkable
class ManagementConnection(Protocol):
    """Minimal RPC-like channel to one remote management server.

    Design rules:
    - Calls are synchronous and are never retried.
    - Any remote failure raises `core.errors.ManagementError`.
    """

    def is_registered(self, object_name: str) -> bool:
        """True when `object_name` is registered on the remote server."""

        ...

    def create_mbean(self, class_name: str, object_name: str) -> None:
        """Instantiate `class_name` remotely and register it as `object_name`."""

        ...

    def invoke(
        self,
        object_name: str,
        operation: str,
        arguments: Sequence[Any] = (),
        signature: Sequence[str] | None = None,
    ) -> Any:
        """Invoke a named operation and return its (JSON-decoded) result."""

        ...

    def read_attribute(self, object_name: str, attribute: str) -> Any:
        """Read one attribute of a remote object."""

        ...

    def close(self) -> None:
        ...
