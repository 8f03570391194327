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

import dataclasses
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Union

from pyddbexport.client.results import PageResult, RequestLimit, RetryResult
from pyddbexport.common.exceptions import RemoteError, SegmentFailure
from pyddbexport.common.export_options import ExportOptions
from pyddbexport.filter.attribute_type import AttributeType
from pyddbexport.filter.filter_operator import FilterOperator
from pyddbexport.filter.nary_filter import NAryFilter
from pyddbexport.filter.query_filter import QueryFilter
from pyddbexport.read.rate_controller import RateController
from pyddbexport.read.read_context import ReadContext
from pyddbexport.split.split import ReadMode

logger = logging.getLogger(__name__)


class ReadState(Enum):
    PENDING = "pending"
    FETCHING = "fetching"
    CONTINUING = "continuing"
    EXHAUSTED = "exhausted"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class Continue:
    page: PageResult
    next_request: 'ReadRequest'

    @property
    def state(self) -> ReadState:
        return ReadState.CONTINUING


@dataclass(frozen=True)
class Done:
    page: PageResult

    @property
    def state(self) -> ReadState:
        return ReadState.EXHAUSTED


@dataclass(frozen=True)
class Failed:
    error: SegmentFailure

    @property
    def state(self) -> ReadState:
        return ReadState.FAILED


@dataclass(frozen=True)
class Cancelled:
    """Cancelled while waiting for read budget. The request was not sent and can be executed again."""
    request: 'ReadRequest'

    @property
    def state(self) -> ReadState:
        return ReadState.CANCELLED


Outcome = Union[Continue, Done, Failed, Cancelled]


class ReadRequest(ABC):
    """
    One page read of a segment, continuing from last_cursor. A request is never reused:
    each page produces a fresh request for the next cursor, so the request currently
    in flight is always a valid checkpoint.
    """

    def __init__(self, context: ReadContext, segment: int, last_cursor: Optional[Dict[str, Any]] = None):
        self.context = context
        self.segment = segment
        self.last_cursor = last_cursor

    @property
    def state(self) -> ReadState:
        return ReadState.PENDING

    def execute(self, rate_controller: Optional[RateController] = None) -> Outcome:
        """
        Read one page. Configuration problems raise ConfigurationError before anything
        is requested from the store. Remote failures are returned as a Failed outcome.
        """
        self.validate()
        rate_controller = rate_controller or self.context.rate_controller
        limit = rate_controller.next_limit()
        if limit is None:
            return Cancelled(self)

        logger.debug("Fetching segment %s from cursor %s with %s", self.segment, self.last_cursor, limit)
        try:
            retry_result = self.fetch_page(limit)
        except RemoteError as e:
            logger.error("Segment %s failed at cursor %s: %s", self.segment, self.last_cursor, e)
            return Failed(SegmentFailure(self.segment, self.last_cursor, e))

        page = dataclasses.replace(retry_result.result, retries=retry_result.retries)
        rate_controller.record(page)

        if page.next_cursor is None:
            return Done(page)
        return Continue(page, self.next_request(page.next_cursor))

    def next_request(self, cursor: Dict[str, Any]) -> 'ReadRequest':
        return type(self)(self.context, self.segment, cursor)

    def table_name(self) -> str:
        return self.context.options.required_string(ExportOptions.TABLE_NAME)

    def validate(self):
        self.table_name()

    @abstractmethod
    def fetch_page(self, limit: RequestLimit) -> RetryResult[PageResult]:
        pass

    def __repr__(self):
        return f"{type(self).__name__}(segment={self.segment}, last_cursor={self.last_cursor})"


class ScanReadRequest(ReadRequest):
    """Parallel scan of one physical segment."""

    def fetch_page(self, limit: RequestLimit) -> RetryResult[PageResult]:
        split = self.context.split
        return self.context.client.scan(
            self.table_name(),
            split.filter_pushdown.copy(),
            self.last_cursor,
            limit,
            self.context.attributes,
            segment=self.segment,
            total_segments=split.total_segments)


class KeyedQueryReadRequest(ReadRequest):
    """Query of the items whose row key equals the segment number."""

    def validate(self):
        self.row_key_name()
        super().validate()

    def row_key_name(self) -> str:
        return self.context.options.required_string(ExportOptions.ROW_KEY_NAME)

    def query_filter(self) -> QueryFilter:
        query_filter = self.context.split.filter_pushdown.copy()
        query_filter.add_key_condition(
            NAryFilter(self.row_key_name(), FilterOperator.EQ, AttributeType.N, str(self.segment)))
        return query_filter

    def fetch_page(self, limit: RequestLimit) -> RetryResult[PageResult]:
        return self.context.client.query(
            self.table_name(),
            self.query_filter(),
            self.last_cursor,
            limit,
            self.context.attributes)


def new_read_request(context: ReadContext, segment: int, cursor: Optional[Dict[str, Any]] = None) -> ReadRequest:
    if context.split.read_mode == ReadMode.QUERY:
        return KeyedQueryReadRequest(context, segment, cursor)
    return ScanReadRequest(context, segment, cursor)
