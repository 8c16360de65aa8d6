"""Sequential pacing of provider calls."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable


@dataclass(slots=True)
class Pacer:
    """Insert the mandatory delays between consecutive lookup calls.

    Calls are grouped in sub-batches of ``sub_batch_size``. The first call of a run
    goes out immediately, the first call of every later sub-batch waits
    ``batch_delay`` seconds and every other call waits ``call_delay`` seconds.
    """

    sub_batch_size: int
    call_delay: float
    batch_delay: float
    sleep: Callable[[float], None] = time.sleep
    _calls: int = field(default=0, init=False)

    def wait(self) -> None:
        if self._calls > 0:
            at_boundary = self._calls % self.sub_batch_size == 0
            self.sleep(self.batch_delay if at_boundary else self.call_delay)
        self._calls += 1

    @property
    def calls(self) -> int:
        return self._calls
