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
from enum import Enum
from typing import Optional, Tuple

from pyddbexport.filter.query_filter import QueryFilter


class ReadMode(str, Enum):
    """How the segments of a split are read from the store."""
    SCAN = "scan"
    QUERY = "query"


@dataclass(frozen=True)
class Split:
    """The segments one parallel worker reads, with the filter template shared by their requests."""
    split_id: int
    segments: Tuple[int, ...]
    total_segments: int
    filter_pushdown: QueryFilter = field(default_factory=QueryFilter, compare=False)
    read_mode: ReadMode = ReadMode.SCAN
    read_capacity_per_second: Optional[float] = None

    @property
    def segment_count(self) -> int:
        return len(self.segments)

    def __repr__(self):
        return (f"Split(id={self.split_id}, segments={list(self.segments)}, total_segments={self.total_segments}, "
                f"read_mode={self.read_mode.value}, read_capacity_per_second={self.read_capacity_per_second})")
