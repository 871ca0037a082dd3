"""Typing animation for bot replies.

Hides how a finished completion is revealed: fixed-size character chunks on
a fixed interval, driven by a single asyncio task. The task is owned by the
animator and must be cancelled when the hosting session goes away.
"""

import asyncio
from collections.abc import Awaitable, Callable, Iterator

DEFAULT_CHUNK_SIZE = 3
DEFAULT_INTERVAL = 0.015  # Seconds between reveal ticks

TickCallback = Callable[[int, str], Awaitable[None]]
DoneCallback = Callable[[bool], None]


def reveal_steps(text: str, chunk_size: int = DEFAULT_CHUNK_SIZE) -> Iterator[str]:
    """Yield successively longer prefixes of ``text``.

    Produces ceil(len(text) / chunk_size) prefixes; the last one is ``text``.
    """
    if chunk_size < 1:
        raise ValueError("chunk_size must be at least 1")
    for end in range(chunk_size, len(text) + chunk_size, chunk_size):
        yield text[:end]


class TypingAnimator:
    """Reveals one message at a time, chunk by chunk.

    Usage:
        animator = TypingAnimator()
        animator.start(index, reply, on_tick, on_done)
        await animator.wait()      # natural completion
        await animator.aclose()    # or teardown mid-reveal
    """

    def __init__(
        self,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        interval: float = DEFAULT_INTERVAL,
    ):
        if chunk_size < 1:
            raise ValueError("chunk_size must be at least 1")
        self._chunk_size = chunk_size
        self._interval = interval
        self._task: asyncio.Task | None = None
        self._on_done: DoneCallback | None = None

    @property
    def chunk_size(self) -> int:
        return self._chunk_size

    @property
    def running(self) -> bool:
        """Whether a reveal is in progress."""
        return self._task is not None and not self._task.done()

    def start(
        self,
        index: int,
        text: str,
        on_tick: TickCallback,
        on_done: DoneCallback,
    ) -> asyncio.Task:
        """Start revealing ``text`` into message ``index``.

        Args:
            index: Transcript index of the message being revealed
            text: Full text to reveal
            on_tick: Awaited with (index, visible_text) on every tick
            on_done: Called exactly once with True on completion, False on cancel

        Returns:
            The asyncio task driving the animation

        Raises:
            RuntimeError: If an animation is already running
        """
        if self.running:
            raise RuntimeError("An animation is already running")
        self._on_done = on_done
        self._task = asyncio.create_task(self._reveal(index, text, on_tick))
        return self._task

    async def _reveal(self, index: int, text: str, on_tick: TickCallback) -> None:
        completed = False
        try:
            for visible in reveal_steps(text, self._chunk_size):
                await asyncio.sleep(self._interval)
                await on_tick(index, visible)
            completed = True
        finally:
            self._finish(completed)

    def _finish(self, completed: bool) -> None:
        # A task cancelled before its first step never runs its finally block,
        # so aclose() may also land here. Only the first call counts.
        on_done, self._on_done = self._on_done, None
        if on_done is not None:
            on_done(completed)

    async def wait(self) -> None:
        """Wait for the running animation to finish, if any.

        Re-raises an exception from a tick callback; a cancelled reveal
        returns normally.
        """
        task = self._task
        if task is None:
            return
        await asyncio.wait({task})
        if not task.cancelled():
            task.result()

    def cancel(self) -> None:
        """Request cancellation of the running animation."""
        if self.running:
            self._task.cancel()

    async def aclose(self) -> None:
        """Cancel the running animation and wait for its cleanup to run."""
        self.cancel()
        try:
            await self.wait()
        finally:
            self._finish(False)
            self._task = None
