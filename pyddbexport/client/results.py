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

from dataclasses import dataclass, field
from typing import Any, Dict, Generic, List, Optional, TypeVar

T = TypeVar('T')


@dataclass(frozen=True)
class RequestLimit:
    """Ceilings of one page request. A value of 0 means no explicit ceiling."""
    max_items: int = 0
    max_bytes: int = 0

    def __post_init__(self):
        if self.max_items < 0 or self.max_bytes < 0:
            raise ValueError(f"limits must not be negative: {self}")


@dataclass
class PageResult:
    """One page of items. A next_cursor of None means the segment is exhausted."""
    items: List[Dict[str, Any]] = field(default_factory=list)
    next_cursor: Optional[Dict[str, Any]] = None
    consumed_capacity_units: float = 0.0
    retries: int = 0

    @property
    def is_last(self) -> bool:
        return self.next_cursor is None


@dataclass(frozen=True)
class RetryResult(Generic[T]):
    result: T
    retries: int = 0


@dataclass(frozen=True)
class TableDescription:
    table_name: str
    item_count: int = 0
    size_bytes: int = 0
    # 0 means on-demand billing
    read_capacity_units: float = 0.0

    @property
    def average_item_size(self) -> float:
        if self.item_count <= 0:
            return 0.0
        return self.size_bytes / self.item_count
