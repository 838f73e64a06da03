# paywall/actions.py
"""
Busy-flag wrapper for user-triggered async actions.

While an action runs, `loading` is True and further runs are rejected.
Client errors end up in `error` (message) and `error_code`; anything else
propagates.
"""
from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Optional

from paywall.errors import PaywallError

_logger = logging.getLogger(__name__)


class AsyncAction:
    def __init__(self, name: str = "action"):
        self.name = name
        self.loading = False
        self.error: Optional[str] = None
        self.error_code: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.error is not None

    async def run(self, fn: Callable[..., Awaitable[Any]], *args, **kwargs) -> Any:
        """
        Run `fn` unless another run is in flight.

        Returns:
            The result of `fn`, or None if rejected or failed
        """
        if self.loading:
            _logger.debug(f"{self.name} already running; ignoring")
            return None

        self.loading = True
        self.error = None
        self.error_code = None
        try:
            return await fn(*args, **kwargs)
        except PaywallError as e:
            self.error = str(e)
            self.error_code = e.code
            _logger.info(f"{self.name} failed: {e.code}")
            return None
        finally:
            self.loading = False
