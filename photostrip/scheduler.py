"""Latest-wins scheduling of compositions.

An in-flight composition cannot be interrupted.  Every submission instead
gets a token from a counter that only goes up, and a result is surfaced only
if no newer submission started while it was rendering.
"""

from __future__ import annotations

import itertools
import logging
from typing import Callable, List, Optional

from .composition import ComposedOutput, CompositionRequest
from .compositor import PrintCompositor

LOGGER = logging.getLogger(__name__)

ResultCallback = Callable[[int, ComposedOutput], None]


class CompositionScheduler:
    """Surface only the newest composition result."""

    def __init__(self, compositor: Optional[PrintCompositor] = None) -> None:
        self._compositor = compositor or PrintCompositor()
        self._tokens = itertools.count(1)
        self._current_token = 0
        self._latest: Optional[ComposedOutput] = None
        self._latest_token = 0
        self._callbacks: List[ResultCallback] = []

    @property
    def current_token(self) -> int:
        """Token of the most recent submission."""
        return self._current_token

    @property
    def latest(self) -> Optional[ComposedOutput]:
        return self._latest

    @property
    def latest_token(self) -> int:
        return self._latest_token

    def on_result(self, callback: ResultCallback) -> None:
        self._callbacks.append(callback)

    def is_current(self, token: int) -> bool:
        return token == self._current_token

    async def submit(self, request: CompositionRequest, *, preview_height: Optional[int] = None) -> Optional[ComposedOutput]:
        """Compose ``request`` and return it, or ``None`` if it went stale."""

        token = next(self._tokens)
        self._current_token = token
        if preview_height is None:
            output = await self._compositor.compose(request)
        else:
            output = await self._compositor.compose_preview(request, preview_height)
        if not self.is_current(token):
            LOGGER.debug("Discarding composition %d; %d is newer", token, self._current_token)
            return None
        self._latest = output
        self._latest_token = token
        for callback in list(self._callbacks):
            callback(token, output)
        return output


__all__ = ["CompositionScheduler"]
