"""
Incremental stream driver.

Owns the growing response buffer of the current turn. Every fragment is
appended, the whole buffer is re-segmented and composed, and the resulting
snapshot is published before the next fragment is awaited.

Each turn gets a generation number. reset() starts a new generation, and
any fragment still tagged with an older one is dropped, so a stale
in-flight fragment can never reach a buffer that has since been reset.
Everything runs on one event loop; no locks are needed.
"""

import logging
from dataclasses import dataclass, field
from typing import AsyncIterable, Callable, Optional, Tuple

from ..rendering.composer import compose_blocks
from ..rendering.models import RenderedBlock
from ..rendering.segmenter import SeparatorPolicy, segment

logger = logging.getLogger(__name__)


@dataclass
class StreamBuffer:
    """Accumulated text of one turn."""
    generation: int = 0
    text: str = ""
    finished: bool = False


@dataclass(frozen=True)
class RenderSnapshot:
    """Best-effort view of the buffer, published after every fragment."""
    generation: int
    text: str
    streaming: bool
    blocks: Tuple[RenderedBlock, ...] = field(default_factory=tuple)


UpdateCallback = Callable[[RenderSnapshot], None]


class StreamDriver:
    """Feeds fragments into the buffer and publishes render snapshots."""

    def __init__(self, on_update: Optional[UpdateCallback] = None,
                 separator_policy: SeparatorPolicy = SeparatorPolicy.CONTAINS):
        self.on_update = on_update
        self.separator_policy = separator_policy
        self.buffer = StreamBuffer(finished=True)

    @property
    def generation(self) -> int:
        return self.buffer.generation

    def reset(self) -> int:
        """Start a new, empty buffer and return its generation token."""
        self.buffer = StreamBuffer(generation=self.buffer.generation + 1)
        logger.debug("Stream buffer reset, generation %d", self.buffer.generation)
        return self.buffer.generation

    def is_current(self, generation: int) -> bool:
        return generation == self.buffer.generation

    def snapshot(self) -> RenderSnapshot:
        buffer = self.buffer
        blocks = segment(buffer.text, final=buffer.finished,
                         separator_policy=self.separator_policy)
        return RenderSnapshot(
            generation=buffer.generation,
            text=buffer.text,
            streaming=not buffer.finished,
            blocks=tuple(compose_blocks(blocks)),
        )

    def publish(self) -> RenderSnapshot:
        snapshot = self.snapshot()
        if self.on_update is not None:
            self.on_update(snapshot)
        return snapshot

    def feed(self, fragment: str, generation: int) -> bool:
        """Append a fragment tagged with its turn's generation.

        Returns:
            False if the fragment was stale (or arrived after finish) and was dropped
        """
        if not self.is_current(generation):
            logger.debug("Dropping fragment from stale generation %d (current %d)",
                         generation, self.buffer.generation)
            return False
        if self.buffer.finished:
            logger.debug("Dropping fragment after stream end, generation %d", generation)
            return False
        self.buffer.text += fragment
        self.publish()
        return True

    def finish(self, generation: int) -> bool:
        """Mark the stream of `generation` as terminated and publish the final view."""
        if not self.is_current(generation) or self.buffer.finished:
            return False
        self.buffer.finished = True
        self.publish()
        return True

    def cancel(self) -> None:
        """Abandon the running turn; its remaining fragments are dropped."""
        self.reset()
        self.buffer.finished = True

    async def consume(self, fragments: AsyncIterable[str],
                      generation: Optional[int] = None) -> str:
        """Drive one turn from an async sequence of text fragments.

        A turn started with reset() can pass its token; otherwise a new
        generation is started here. Stops awaiting as soon as the turn is
        superseded by a reset. If the sequence fails, the partial text stays
        in the buffer, marked as no longer streaming, and the exception
        propagates.

        Returns:
            The full text received for this turn
        """
        if generation is None:
            generation = self.reset()
        self.publish()
        iterator = fragments.__aiter__()
        try:
            while self.is_current(generation):
                try:
                    fragment = await iterator.__anext__()
                except StopAsyncIteration:
                    break
                if not self.feed(fragment, generation):
                    break
        finally:
            self.finish(generation)
            if not self.is_current(generation):
                await _close(iterator)
        return self.buffer.text if self.is_current(generation) else ""


async def _close(iterator) -> None:
    aclose = getattr(iterator, "aclose", None)
    if aclose is not None:
        await aclose()
