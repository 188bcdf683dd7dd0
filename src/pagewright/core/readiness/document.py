"""Bounded poll for the document to settle after a navigation."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from ..errors import ScriptExecutionFault

logger = logging.getLogger(__name__)

MAX_POLLS = 20
REQUIRED_CONSECUTIVE_READY = 3
POLL_INTERVAL = 0.5


@dataclass
class DocumentReadyState:
    polls: int = 0
    consecutive_ready: int = 0
    not_ready: int = 0

    def record(self, ready: bool) -> None:
        self.polls += 1
        if ready:
            self.consecutive_ready += 1
        else:
            self.consecutive_ready = 0
            self.not_ready += 1

    @property
    def settled(self) -> bool:
        return self.consecutive_ready >= REQUIRED_CONSECUTIVE_READY

    @property
    def exhausted(self) -> bool:
        return self.polls >= MAX_POLLS


class DocumentReadyPoller:
    """Waits up to ~10 seconds for the document to report ready 3 times in a row."""

    def __init__(
        self,
        probe: Callable[[], bool],
        sleep: Callable[[float], None] = time.sleep,
        interval: float = POLL_INTERVAL,
    ) -> None:
        self._probe = probe
        self._sleep = sleep
        self.interval = interval

    def _is_ready(self) -> bool:
        try:
            return bool(self._probe())
        except ScriptExecutionFault as e:
            logger.debug("Document ready probe failed: %s", e)
            return False

    def settle(self) -> DocumentReadyState:
        state = DocumentReadyState()
        while not state.settled and not state.exhausted:
            self._sleep(self.interval)
            ready = self._is_ready()
            state.record(ready)
            logger.debug(
                "Document ready: %s. Not ready %d times, ready %d times in a row.",
                ready,
                state.not_ready,
                state.consecutive_ready,
            )
        if not state.settled:
            logger.info("Document did not settle after %d polls", state.polls)
        return state
