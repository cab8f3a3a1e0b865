"""
Render scheduling for interactive callers.

The engine itself is synchronous and stateless. An editor that re-renders
while the user types needs two more things, provided here:
- a debounce, so a burst of edits triggers one render;
- a monotonic token, so only the most recently started render is kept even
  when an older one finishes later.
"""

import asyncio
import functools
from typing import Any, Optional

from vellum.contexts.rendering.logger import _log_debug

DEFAULT_DEBOUNCE_S = 0.4


class RenderTokenGate:
    """
    Monotonic tokens for render requests.

    issue() is called when a render starts; accept() keeps a result only if
    no newer render has started since.
    """

    def __init__(self):
        self._latest_token = 0
        self.result: Any = None
        self.result_token: Optional[int] = None

    @property
    def latest_token(self) -> int:
        return self._latest_token

    def issue(self) -> int:
        """Start a new request and return its token."""
        self._latest_token += 1
        return self._latest_token

    def is_current(self, token: int) -> bool:
        """Whether token belongs to the most recently started request."""
        return token == self._latest_token

    def accept(self, token: int, result: Any) -> bool:
        """
        Offer a finished request's result.

        Returns:
            True if the result was kept, False if a newer request has started
        """
        if not self.is_current(token):
            _log_debug(f"Discarding stale render result (token {token} < {self._latest_token})")
            return False
        self.result = result
        self.result_token = token
        return True


class DebouncedRenderer:
    """
    Debounced, latest-wins wrapper around a DocumentRenderer for asyncio callers.

    Attributes:
        renderer: Object with render(record, template_id, mode) -> str
        delay_s: Quiet period before a requested render starts
        latest: Output of the last accepted render (None before the first)
    """

    def __init__(self, renderer, delay_s: float = DEFAULT_DEBOUNCE_S):
        self.renderer = renderer
        self.delay_s = delay_s
        self.gate = RenderTokenGate()
        self._pending: Optional[asyncio.Task] = None

    @property
    def latest(self) -> Optional[str]:
        return self.gate.result

    def request(
        self, record: Any, template_id: Optional[str] = None, mode: Optional[str] = "desktop"
    ) -> asyncio.Task:
        """
        Schedule a render after the quiet period, cancelling a pending one.

        Must be called from a running event loop.

        Returns:
            Task resolving to the rendered output, or None if superseded
        """
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        token = self.gate.issue()
        self._pending = asyncio.ensure_future(self._run(token, record, template_id, mode))
        return self._pending

    async def _run(
        self, token: int, record: Any, template_id: Optional[str], mode: Optional[str]
    ) -> Optional[str]:
        await asyncio.sleep(self.delay_s)
        loop = asyncio.get_running_loop()
        output = await loop.run_in_executor(
            None, functools.partial(self.renderer.render, record, template_id, mode)
        )
        if self.gate.accept(token, output):
            return output
        return None

    def cancel(self) -> None:
        """Cancel the pending render, if any."""
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()

    async def flush(self) -> Optional[str]:
        """Wait for the pending render (if any) and return the latest accepted output."""
        pending = self._pending
        if pending is not None and not pending.done():
            try:
                await pending
            except asyncio.CancelledError:
                # Superseded by a newer request; fall through to the latest result
                if self._pending is not pending:
                    return await self.flush()
                raise
        return self.latest
