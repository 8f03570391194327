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

from dataclasses import dataclass
from typing import List, Optional

from pyddbexport.client.results import TableDescription
from pyddbexport.split.split import Split


@dataclass
class Plan:
    """Splits of an export job, computed once at planning time."""
    _splits: List[Split]
    _table_description: Optional[TableDescription] = None

    def splits(self) -> List[Split]:
        return self._splits

    def table_description(self) -> Optional[TableDescription]:
        return self._table_description

    def total_segments(self) -> int:
        return sum(split.segment_count for split in self._splits)
