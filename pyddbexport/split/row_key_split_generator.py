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
from typing import List, Optional

from pyddbexport.common.export_options import ExportOptions
from pyddbexport.common.exceptions import ConfigurationError
from pyddbexport.filter.attribute_type import AttributeType
from pyddbexport.filter.filter_operator import FilterOperator
from pyddbexport.filter.nary_filter import NAryFilter
from pyddbexport.filter.query_filter import IndexInfo, QueryFilter
from pyddbexport.split.split import ReadMode, Split
from pyddbexport.split.split_generator import SplitGenerator

logger = logging.getLogger(__name__)


class RowKeySplitGenerator(SplitGenerator):
    """
    Sampled key-range export over a secondary index whose numeric row key is bucketed
    into 1..row-key.space. Every sampled row key value becomes one segment, read by a keyed
    query bounded to [sort-key.min-value, sort-key.max-value].

    The total_segments argument of generate_splits is ignored, the segment count comes
    from row-key.space and row-sample.percent.
    """

    def __init__(self, options: ExportOptions, template: Optional[QueryFilter] = None):
        super().__init__(template)
        self.index_name = options.required_string(ExportOptions.INDEX_NAME)
        self.row_key_name = options.required_string(ExportOptions.ROW_KEY_NAME)
        self.sort_key_name = options.required_string(ExportOptions.SORT_KEY_NAME)
        self.min_sort_key = options.required_long(ExportOptions.SORT_KEY_MIN_VALUE)
        self.max_sort_key = options.required_long(ExportOptions.SORT_KEY_MAX_VALUE)
        if self.min_sort_key > self.max_sort_key:
            raise ConfigurationError(
                ExportOptions.SORT_KEY_MIN_VALUE.key(),
                f"{ExportOptions.SORT_KEY_MIN_VALUE.key()} ({self.min_sort_key}) is greater than "
                f"{ExportOptions.SORT_KEY_MAX_VALUE.key()} ({self.max_sort_key})")

        self.sample_percent = options.row_sample_percent()
        if not 0 < self.sample_percent <= 1:
            raise ConfigurationError(
                ExportOptions.ROW_SAMPLE_PERCENT.key(),
                f"{ExportOptions.ROW_SAMPLE_PERCENT.key()} must be in (0, 1], got {self.sample_percent}")
        self.key_space = options.row_key_space()
        if self.key_space < 1:
            raise ConfigurationError(
                ExportOptions.ROW_KEY_SPACE.key(),
                f"{ExportOptions.ROW_KEY_SPACE.key()} must be positive, got {self.key_space}")

    def segment_count(self) -> int:
        return max(1, round(self.key_space * self.sample_percent))

    def generate_splits(self, total_segments: int, num_workers: int) -> List[Split]:
        segments = self.segment_count()
        logger.info("Sampling %d of %d row keys of index %s", segments, self.key_space, self.index_name)
        # row key values start at 1
        return self._build_splits(segments, num_workers, ReadMode.QUERY, first_segment=1)

    def _new_filter(self) -> QueryFilter:
        query_filter = super()._new_filter()
        query_filter.with_index(IndexInfo(self.index_name))
        query_filter.add_key_condition(NAryFilter(
            self.sort_key_name, FilterOperator.BETWEEN, AttributeType.N,
            self.min_sort_key, self.max_sort_key))
        return query_filter
