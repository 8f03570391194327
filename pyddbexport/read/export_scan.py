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
import math
from dataclasses import replace
from typing import Optional

from pyddbexport.client.remote_client import RemoteClient
from pyddbexport.client.results import TableDescription
from pyddbexport.common.exceptions import ConfigurationError
from pyddbexport.common.export_options import ExportOptions, SplitPolicy
from pyddbexport.filter.query_filter import QueryFilter
from pyddbexport.read.plan import Plan
from pyddbexport.split.row_key_split_generator import RowKeySplitGenerator
from pyddbexport.split.segment_split_generator import SegmentSplitGenerator
from pyddbexport.split.split_generator import SplitGenerator

logger = logging.getLogger(__name__)


class ExportScan:
    """Plans an export: picks the split policy and divides the read throughput among the splits."""

    # upper bound of TotalSegments accepted by a parallel scan
    MAX_TOTAL_SEGMENTS = 1000000

    def __init__(self,
                 client: RemoteClient,
                 options: ExportOptions,
                 query_filter: Optional[QueryFilter] = None,
                 parallelism: Optional[int] = None):
        self.client = client
        self.options = options
        self.query_filter = query_filter
        self.parallelism = parallelism

    def plan(self) -> Plan:
        table_name = self.options.required_string(ExportOptions.TABLE_NAME)
        read_percent = self.options.throughput_read_percent()
        if read_percent <= 0:
            raise ConfigurationError(
                ExportOptions.THROUGHPUT_READ_PERCENT.key(),
                f"{ExportOptions.THROUGHPUT_READ_PERCENT.key()} must be positive, got {read_percent}")
        num_workers = self.parallelism or self.options.scan_parallelism()
        if num_workers < 1:
            raise ConfigurationError(
                ExportOptions.SCAN_PARALLELISM.key(),
                f"{ExportOptions.SCAN_PARALLELISM.key()} must be at least 1, got {num_workers}")
        for capacity_option, configured_capacity in (
                (ExportOptions.READ_CAPACITY_UNITS, self.options.read_capacity_units()),
                (ExportOptions.READ_ON_DEMAND_CAPACITY_UNITS, self.options.read_on_demand_capacity_units())):
            if configured_capacity is not None and configured_capacity <= 0:
                raise ConfigurationError(
                    capacity_option.key(),
                    f"{capacity_option.key()} must be positive, got {configured_capacity}")

        # settings are validated before the first remote call
        generator = self._create_generator()
        description = self.client.describe_table(table_name)
        logger.info("Planning export of %s: %d items, %d bytes, %.1f read capacity units",
                    table_name, description.item_count, description.size_bytes,
                    description.read_capacity_units)

        splits = generator.generate_splits(self._total_segments(description, num_workers), num_workers)
        capacity = self._read_capacity(description) * read_percent
        capacity_per_split = capacity / len(splits)
        splits = [replace(split, read_capacity_per_second=capacity_per_split) for split in splits]
        logger.info("Planned %d splits, %.2f read capacity units per second each", len(splits), capacity_per_split)
        return Plan(splits, description)

    def _create_generator(self) -> SplitGenerator:
        if self.options.split_policy() == SplitPolicy.SAMPLED_KEY_RANGE:
            return RowKeySplitGenerator(self.options, self.query_filter)
        return SegmentSplitGenerator(self.query_filter)

    def _total_segments(self, description: TableDescription, num_workers: int) -> int:
        configured = self.options.scan_segments()
        if configured is not None:
            if configured < 1:
                raise ConfigurationError(
                    ExportOptions.SCAN_SEGMENTS.key(),
                    f"{ExportOptions.SCAN_SEGMENTS.key()} must be at least 1, got {configured}")
            return min(configured, self.MAX_TOTAL_SEGMENTS)
        by_size = math.ceil(description.size_bytes / self.options.scan_segment_target_size())
        return min(max(1, num_workers, by_size), self.MAX_TOTAL_SEGMENTS)

    def _read_capacity(self, description: TableDescription) -> float:
        configured = self.options.read_capacity_units()
        if configured is not None:
            return configured
        if description.read_capacity_units > 0:
            return description.read_capacity_units
        logger.info("Table %s is on-demand, assuming %.0f read capacity units",
                    description.table_name, self.options.read_on_demand_capacity_units())
        return self.options.read_on_demand_capacity_units()
