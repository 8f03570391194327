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
from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

from pyddbexport.filter.query_filter import QueryFilter
from pyddbexport.split.split import ReadMode, Split

logger = logging.getLogger(__name__)


class SplitGenerator(ABC):
    """
    Divides a number of segments into splits, one per parallel worker.
    """

    def __init__(self, template: Optional[QueryFilter] = None):
        self.template = template

    @abstractmethod
    def generate_splits(self, total_segments: int, num_workers: int) -> List[Split]:
        """
        Create splits covering every segment exactly once.
        """
        pass

    def _new_filter(self) -> QueryFilter:
        return self.template.copy() if self.template is not None else QueryFilter()

    def _build_splits(self,
                      total_segments: int,
                      num_workers: int,
                      read_mode: ReadMode,
                      first_segment: int = 0) -> List[Split]:
        if total_segments < 1:
            raise ValueError(f"total_segments must be at least 1, got {total_segments}")
        num_workers = max(1, min(num_workers, total_segments))

        splits = []
        for split_id in range(num_workers):
            start_pos, end_pos = self._compute_segment_range(total_segments, num_workers, split_id)
            segments = tuple(range(first_segment + start_pos, first_segment + end_pos))
            splits.append(Split(
                split_id=split_id,
                segments=segments,
                total_segments=total_segments,
                filter_pushdown=self._new_filter(),
                read_mode=read_mode))

        logger.info("Generated %d splits over %d segments", len(splits), total_segments)
        return splits

    @staticmethod
    def _compute_segment_range(total_segments: int, num_workers: int, split_id: int) -> Tuple[int, int]:
        """
        Calculate start and end positions of a split's segments.
        Uses balanced distribution to avoid last split overload.
        """
        base_segments_per_split = total_segments // num_workers
        remainder = total_segments % num_workers

        # Each of the first 'remainder' splits gets one extra segment
        if split_id < remainder:
            num_segments = base_segments_per_split + 1
            start_pos = split_id * (base_segments_per_split + 1)
        else:
            num_segments = base_segments_per_split
            start_pos = (
                    remainder * (base_segments_per_split + 1) +
                    (split_id - remainder) * base_segments_per_split
            )

        end_pos = start_pos + num_segments
        return start_pos, end_pos
