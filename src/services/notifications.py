"""Product change notifications.

Listeners are called synchronously in registration order whenever a
product's quantity is set. A failing listener is logged and skipped so the
rest still hear about the change.
"""
from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Protocol, Union

from src.models.tree import Product

logger = logging.getLogger(__name__)


class ProductListener(Protocol):
    def on_product_changed(self, product: Product) -> None: ...


Listener = Union[ProductListener, Callable[[Product], Any]]

_handle_ids = itertools.count(1)


@dataclass(frozen=True)
class ListenerHandle:
    """Token returned by :meth:`ChangeBus.register`, used to unregister."""
    listener: Listener = field(compare=False)
    id: int = field(default_factory=lambda: next(_handle_ids))


def _deliver(listener: Listener, product: Product) -> None:
    callback = getattr(listener, "on_product_changed", None)
    if callback is not None:
        callback(product)
    else:
        listener(product)


class ChangeBus:
    """Ordered registry of change listeners."""

    def __init__(self):
        self._handles: list[ListenerHandle] = []

    def __len__(self) -> int:
        return len(self._handles)

    @property
    def listeners(self) -> tuple[Listener, ...]:
        return tuple(h.listener for h in self._handles)

    def register(self, listener: Listener) -> ListenerHandle:
        if not hasattr(listener, "on_product_changed") and not callable(listener):
            raise TypeError(
                f"Listener must be callable or define on_product_changed, got {type(listener).__name__}"
            )
        handle = ListenerHandle(listener)
        self._handles.append(handle)
        return handle

    def unregister(self, handle_or_listener: Union[ListenerHandle, Listener]) -> bool:
        """Remove a registration by handle, or the first one for that listener object."""
        for i, handle in enumerate(self._handles):
            if handle is handle_or_listener or handle.listener is handle_or_listener:
                del self._handles[i]
                return True
        return False

    def clear(self) -> None:
        self._handles.clear()

    def notify(self, product: Product) -> None:
        # Snapshot so listeners may unregister themselves while being called
        for handle in list(self._handles):
            try:
                _deliver(handle.listener, product)
            except Exception:
                logger.exception(
                    "Change listener %r failed for product %r", handle.listener, product.name
                )
