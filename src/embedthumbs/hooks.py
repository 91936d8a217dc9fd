"""
Lifecycle hook registry.

Hosts fire named actions (notifications) and filters (value pipelines)
at document lifecycle points; subsystems register async callbacks for
them. Callbacks run in registration order.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Awaitable, Callable
from typing import Any

logger = logging.getLogger(__name__)

# Fired with (session, document_id) before a document is deleted.
BEFORE_DELETE_DOCUMENT = "before_delete_document"

# Fired with (session, document_id, document) after a document is updated.
DOCUMENT_UPDATED = "document_updated"

# Filter over the oEmbed HTML: (html, session, data, url, document_id) -> html.
OEMBED_DATAPARSE = "oembed_dataparse"

HookCallback = Callable[..., Awaitable[Any]]


class HookRegistry:
    """Registry of async action and filter callbacks."""

    def __init__(self) -> None:
        self._actions: defaultdict[str, list[HookCallback]] = defaultdict(list)
        self._filters: defaultdict[str, list[HookCallback]] = defaultdict(list)

    def add_action(self, name: str, callback: HookCallback) -> None:
        """Register *callback* for the action *name*."""
        self._actions[name].append(callback)
        logger.debug("Action registered: %s -> %s", name, _callback_name(callback))

    def add_filter(self, name: str, callback: HookCallback) -> None:
        """Register *callback* for the filter *name*."""
        self._filters[name].append(callback)
        logger.debug("Filter registered: %s -> %s", name, _callback_name(callback))

    def has_hook(self, name: str) -> bool:
        """Check whether any action or filter is registered for *name*."""
        return bool(self._actions.get(name) or self._filters.get(name))

    async def do_action(self, name: str, *args: Any) -> None:
        """Run every callback registered for the action *name*."""
        for callback in list(self._actions.get(name, ())):
            await callback(*args)

    async def apply_filters(self, name: str, value: Any, *args: Any) -> Any:
        """Pass *value* through every filter registered for *name*.

        Each callback receives the current value followed by *args* and
        returns the next value.
        """
        for callback in list(self._filters.get(name, ())):
            value = await callback(value, *args)
        return value


def _callback_name(callback: HookCallback) -> str:
    return getattr(callback, "__qualname__", repr(callback))
