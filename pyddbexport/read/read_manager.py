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
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterator, Optional, Tuple

from pyddbexport.read.read_context import ReadContext
from pyddbexport.read.read_request import (Cancelled, Continue, Failed,
                                           ReadRequest, new_read_request)

logger = logging.getLogger(__name__)


@dataclass
class ReadStats:
    pages: int = 0
    items: int = 0
    consumed_capacity_units: float = 0.0
    retries: int = 0
    throttled_seconds: float = 0.0


@dataclass(frozen=True)
class ReadCheckpoint:
    """
    Position of a worker after its last fully delivered page: the segment in flight with
    the cursor to continue from, and the segments already read to the end.
    """
    segment: Optional[int] = None
    cursor: Optional[Dict[str, Any]] = None
    completed_segments: Tuple[int, ...] = field(default_factory=tuple)


class ReadManager:
    """
    Reads every segment of one split, one page at a time, and yields the decoded rows.

    The manager is sequential. Cancellation is checked between pages, after which
    checkpoint can be handed to a new manager to continue where this one stopped.
    """

    def __init__(self, context: ReadContext, checkpoint: Optional[ReadCheckpoint] = None):
        self.context = context
        self.checkpoint = checkpoint or ReadCheckpoint()
        self.stats = ReadStats()
        self.cancelled = False

    def read(self) -> Iterator[Dict[str, Any]]:
        split = self.context.split
        reporter = self.context.reporter
        client = self.context.client

        for segment in split.segments:
            if segment in self.checkpoint.completed_segments:
                continue
            cursor = self.checkpoint.cursor if self.checkpoint.segment == segment else None
            request: Optional[ReadRequest] = new_read_request(self.context, segment, cursor)
            logger.info("Reading segment %s of split %s%s", segment, split.split_id,
                        " from checkpoint" if cursor else "")

            while request is not None:
                if reporter.is_cancelled():
                    logger.info("Split %s cancelled at segment %s", split.split_id, segment)
                    self.cancelled = True
                    return

                outcome = request.execute(self.context.rate_controller)
                if isinstance(outcome, Failed):
                    raise outcome.error
                if isinstance(outcome, Cancelled):
                    logger.info("Split %s cancelled while throttled at segment %s", split.split_id, segment)
                    self.cancelled = True
                    return

                page = outcome.page
                self.stats.pages += 1
                self.stats.items += len(page.items)
                self.stats.consumed_capacity_units += page.consumed_capacity_units
                self.stats.retries += page.retries
                self.stats.throttled_seconds = self.context.rate_controller.throttled_seconds

                for item in page.items:
                    yield client.decode_item(item)

                if isinstance(outcome, Continue):
                    self.checkpoint = replace(self.checkpoint, segment=segment, cursor=page.next_cursor)
                    request = outcome.next_request
                else:
                    self.checkpoint = ReadCheckpoint(
                        completed_segments=self.checkpoint.completed_segments + (segment,))
                    request = None
                reporter.progress(self.stats)

            logger.debug("Segment %s of split %s exhausted", segment, split.split_id)

        logger.info("Split %s done: %s", split.split_id, self.stats)

    @property
    def finished(self) -> bool:
        return set(self.context.split.segments) <= set(self.checkpoint.completed_segments)
