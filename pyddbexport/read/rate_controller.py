################################################################################
#  Licensed to the Apache Software Foundation (ASF) under one
#  or more contributor license agreements.  See the NOTICE file
#  distributed with this work for additional information
#  regarding copyright ownership.  The ASF licenses this file
#  to you under the Apache License, Version 2.0 (the
#  "License"); you may not use this file except in compliance
#  with the License.  You may obtain a copy of the License at
#
#      http://www.apache.org/licenses/LICENSE-2.0
#
#  Unless required by applicable law or agreed to in writing, software
#  distributed under the License is distributed on an "AS IS" BASIS,
#  WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
#  See the License for the specific language governing permissions and
# limitations under the License.
################################################################################

"""
Paces the page requests of one worker so that the capacity it consumes stays within
its share of the table's read throughput.
"""

import logging
import math
import threading
import time
from typing import Callable, Optional

from pyddbexport.client.results import PageResult, RequestLimit

logger = logging.getLogger(__name__)


def capacity_per_item(average_item_size: float, capacity_unit_bytes: int) -> float:
    """Estimate the read capacity one item costs from the average item size of the table."""
    if average_item_size <= 0:
        return 1.0
    return average_item_size / capacity_unit_bytes


class RateController:
    """
    Token budget of read capacity per window.

    next_limit() blocks while the budget of the current window is used up, then sizes the
    next page from what is left. record() charges the capacity a page actually consumed,
    so a window that was overspent starts the next one in debt. With a cancel_event the
    wait ends as soon as the event is set and next_limit() returns None.

    Page sizing adapts additively on clean pages and multiplicatively on pages that
    needed retries.
    """

    MIN_SCALE = 0.1
    SCALE_INCREASE = 0.1
    ESTIMATE_WEIGHT = 0.2

    def __init__(self,
                 read_capacity_per_second: float,
                 window: float = 1.0,
                 max_items: int = 1000,
                 max_bytes: int = 1 << 20,
                 capacity_unit_bytes: int = 8 << 10,
                 initial_capacity_per_item: float = 1.0,
                 clock: Callable[[], float] = time.monotonic,
                 sleep: Callable[[float], None] = time.sleep,
                 cancel_event: Optional[threading.Event] = None):
        if read_capacity_per_second is None or read_capacity_per_second <= 0:
            raise ValueError(f"read_capacity_per_second must be positive, got {read_capacity_per_second}")
        if window <= 0:
            raise ValueError(f"window must be positive, got {window}")
        self.read_capacity_per_second = read_capacity_per_second
        self.window = window
        self.max_items = max(1, max_items)
        self.max_bytes = max(capacity_unit_bytes, max_bytes)
        self.capacity_unit_bytes = capacity_unit_bytes
        self._clock = clock
        self._sleep = sleep
        self._cancel_event = cancel_event

        self._budget = read_capacity_per_second * window
        self._window_start: Optional[float] = None
        self._consumed = 0.0
        self._capacity_per_item = initial_capacity_per_item if initial_capacity_per_item > 0 else 1.0
        self._scale = 1.0
        self.throttled_seconds = 0.0

    @property
    def budget(self) -> float:
        return self._budget

    @property
    def consumed(self) -> float:
        return self._consumed

    @property
    def scale(self) -> float:
        return self._scale

    @property
    def estimated_capacity_per_item(self) -> float:
        return self._capacity_per_item

    def next_limit(self) -> Optional[RequestLimit]:
        self._roll_window(self._clock())
        while self._consumed >= self._budget:
            window_end = self._window_start + self.window
            wait = window_end - self._clock()
            if wait > 0:
                logger.debug("Read budget of %.1f used up (%.1f consumed), waiting %.3fs",
                             self._budget, self._consumed, wait)
                if self._wait(wait):
                    logger.info("Throttled wait interrupted by cancellation")
                    return None
                self.throttled_seconds += wait
            self._roll_window(max(self._clock(), window_end))

        remaining = self._budget - self._consumed
        max_items = int(remaining / self._capacity_per_item * self._scale)
        max_items = max(1, min(max_items, self.max_items))
        max_bytes = int(remaining * self.capacity_unit_bytes)
        max_bytes = max(self.capacity_unit_bytes, min(max_bytes, self.max_bytes))
        return RequestLimit(max_items=max_items, max_bytes=max_bytes)

    def record(self, page: PageResult):
        self._consumed += page.consumed_capacity_units
        if page.items and page.consumed_capacity_units > 0:
            observed = page.consumed_capacity_units / len(page.items)
            self._capacity_per_item = ((1 - self.ESTIMATE_WEIGHT) * self._capacity_per_item
                                       + self.ESTIMATE_WEIGHT * observed)
        if page.retries > 0:
            self._scale = max(self.MIN_SCALE, self._scale / 2)
            logger.debug("Page needed %d retries, page scale reduced to %.2f", page.retries, self._scale)
        else:
            self._scale = min(1.0, self._scale + self.SCALE_INCREASE)

    def _wait(self, seconds: float) -> bool:
        if self._cancel_event is None:
            self._sleep(seconds)
            return False
        return self._cancel_event.wait(seconds)

    def _roll_window(self, now: float):
        if self._window_start is None:
            self._window_start = now
            return
        if now < self._window_start + self.window:
            return
        elapsed_windows = max(1, math.floor((now - self._window_start) / self.window))
        # overspend carries over as debt
        self._consumed = max(0.0, self._consumed - self._budget * elapsed_windows)
        self._window_start += elapsed_windows * self.window
