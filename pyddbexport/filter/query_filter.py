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

import copy
from dataclasses import dataclass
from typing import Any, Dict, Optional

from pyddbexport.filter.nary_filter import NAryFilter


@dataclass(frozen=True)
class IndexInfo:
    """Selects the secondary index a query runs against."""
    index_name: str


class QueryFilter:
    """
    Push-down predicates of a read: key conditions for queries, scan filter for scans,
    plus an optional index selector. Holds at most one condition per column.
    """

    def __init__(self,
                 key_conditions: Optional[Dict[str, Dict[str, Any]]] = None,
                 scan_filter: Optional[Dict[str, Dict[str, Any]]] = None,
                 index: Optional[IndexInfo] = None):
        self.key_conditions: Dict[str, Dict[str, Any]] = key_conditions if key_conditions is not None else {}
        self.scan_filter: Dict[str, Dict[str, Any]] = scan_filter if scan_filter is not None else {}
        self.index = index

    def add_key_condition(self, nary_filter: NAryFilter) -> 'QueryFilter':
        self.key_conditions[nary_filter.column_name] = nary_filter.condition()
        return self

    def add_scan_filter(self, nary_filter: NAryFilter) -> 'QueryFilter':
        self.scan_filter[nary_filter.column_name] = nary_filter.condition()
        return self

    def with_index(self, index: Optional[IndexInfo]) -> 'QueryFilter':
        self.index = index
        return self

    def copy(self) -> 'QueryFilter':
        return QueryFilter(
            key_conditions=copy.deepcopy(self.key_conditions),
            scan_filter=copy.deepcopy(self.scan_filter),
            index=self.index)

    def is_empty(self) -> bool:
        return not self.key_conditions and not self.scan_filter and self.index is None

    def __eq__(self, other):
        if not isinstance(other, QueryFilter):
            return False
        return (self.key_conditions == other.key_conditions
                and self.scan_filter == other.scan_filter
                and self.index == other.index)

    def __repr__(self):
        return (f"QueryFilter(key_conditions={self.key_conditions}, scan_filter={self.scan_filter}, "
                f"index={self.index})")
