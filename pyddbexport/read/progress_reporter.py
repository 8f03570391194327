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

import logging
import threading
from abc import ABC, abstractmethod
from typing import Optional

logger = logging.getLogger(__name__)


class ProgressReporter(ABC):
    """Receives the statistics of a worker after every page and tells it when to stop."""

    @abstractmethod
    def progress(self, stats) -> None:
        pass

    @abstractmethod
    def is_cancelled(self) -> bool:
        pass

    @property
    def cancel_event(self) -> Optional[threading.Event]:
        """Event set on cancellation, for waits that should end early. None if there is none."""
        return None


class NoOpReporter(ProgressReporter):

    def progress(self, stats) -> None:
        pass

    def is_cancelled(self) -> bool:
        return False


class CancellableReporter(ProgressReporter):
    """Reporter that can be cancelled from another thread and logs every report_every pages."""

    def __init__(self, name: str = "reader", report_every: int = 100, cancel_event: threading.Event = None):
        self.name = name
        self.report_every = report_every
        self._cancelled = cancel_event or threading.Event()
        self.last_stats = None

    def cancel(self):
        self._cancelled.set()

    def is_cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def cancel_event(self) -> threading.Event:
        return self._cancelled

    def progress(self, stats) -> None:
        self.last_stats = stats
        if self.report_every > 0 and stats.pages % self.report_every == 0:
            logger.info("%s: %s", self.name, stats)
