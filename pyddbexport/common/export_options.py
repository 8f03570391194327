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

from datetime import timedelta
from enum import Enum
from typing import List, Optional

from pyddbexport.common.exceptions import ConfigurationError
from pyddbexport.common.memory_size import MemorySize
from pyddbexport.common.options import Options
from pyddbexport.common.options.config_option import ConfigOption
from pyddbexport.common.options.config_options import ConfigOptions


class SplitPolicy(str, Enum):
    """
    Specifies how the key space of the table is divided into splits.
    """
    FULL_SEGMENT = "full-segment"
    SAMPLED_KEY_RANGE = "sampled-key-range"


class ExportOptions:
    """Options of an export job."""

    TABLE_NAME: ConfigOption[str] = (
        ConfigOptions.key("table-name")
        .string_type()
        .no_default_value()
        .with_description("Name of the table to export.")
    )

    INDEX_NAME: ConfigOption[str] = (
        ConfigOptions.key("index-name")
        .string_type()
        .no_default_value()
        .with_description("Secondary index queried by the sampled key-range policy.")
    )

    ROW_KEY_NAME: ConfigOption[str] = (
        ConfigOptions.key("row-key.name")
        .string_type()
        .no_default_value()
        .with_description(
            "Numeric partition key attribute of the index. Its values are expected to be "
            "bucketed into 1..row-key.space so that each value can be read as one segment."
        )
    )

    SORT_KEY_NAME: ConfigOption[str] = (
        ConfigOptions.key("sort-key.name")
        .string_type()
        .no_default_value()
        .with_description("Numeric sort key attribute of the index.")
    )

    SORT_KEY_MIN_VALUE: ConfigOption[int] = (
        ConfigOptions.key("sort-key.min-value")
        .long_type()
        .no_default_value()
        .with_description("Inclusive lower bound of the exported sort key range.")
    )

    SORT_KEY_MAX_VALUE: ConfigOption[int] = (
        ConfigOptions.key("sort-key.max-value")
        .long_type()
        .no_default_value()
        .with_description("Inclusive upper bound of the exported sort key range.")
    )

    ROW_SAMPLE_PERCENT: ConfigOption[float] = (
        ConfigOptions.key("row-sample.percent")
        .float_type()
        .default_value(0.001)
        .with_description("Fraction of the row key space to export, in (0, 1].")
    )

    ROW_KEY_SPACE: ConfigOption[int] = (
        ConfigOptions.key("row-key.space")
        .int_type()
        .default_value(10000)
        .with_description("Number of distinct synthetic row key values.")
    )

    ATTRIBUTES: ConfigOption[str] = (
        ConfigOptions.key("attributes")
        .string_type()
        .no_default_value()
        .with_description("Comma-separated attributes to fetch. All attributes are fetched by default.")
    )

    THROUGHPUT_READ_PERCENT: ConfigOption[float] = (
        ConfigOptions.key("throughput.read-percent")
        .float_type()
        .default_value(0.5)
        .with_description("Fraction of the table's read capacity the whole job may use.")
    )

    READ_CAPACITY_UNITS: ConfigOption[float] = (
        ConfigOptions.key("read.capacity-units")
        .float_type()
        .no_default_value()
        .with_description("Overrides the read capacity reported by the store.")
    )

    READ_ON_DEMAND_CAPACITY_UNITS: ConfigOption[float] = (
        ConfigOptions.key("read.on-demand-capacity-units")
        .float_type()
        .default_value(40000.0)
        .with_description("Read capacity assumed for tables without provisioned throughput.")
    )

    READ_PAGE_MAX_ITEMS: ConfigOption[int] = (
        ConfigOptions.key("read.page.max-items")
        .int_type()
        .default_value(1000)
        .with_description("Upper bound of items requested by one page.")
    )

    READ_PAGE_MAX_SIZE: ConfigOption[MemorySize] = (
        ConfigOptions.key("read.page.max-size")
        .memory_type()
        .default_value(MemorySize.of_mebi_bytes(1))
        .with_description("Upper bound of bytes requested by one page.")
    )

    READ_CAPACITY_UNIT_SIZE: ConfigOption[MemorySize] = (
        ConfigOptions.key("read.capacity-unit-size")
        .memory_type()
        .default_value(MemorySize.of_kibi_bytes(8))
        .with_description("Bytes read per consumed capacity unit (eventually consistent reads).")
    )

    READ_RATE_WINDOW: ConfigOption[timedelta] = (
        ConfigOptions.key("read.rate.window")
        .duration_type()
        .default_value(timedelta(seconds=1))
        .with_description("Length of the window the read budget is accounted over.")
    )

    RETRY_MAX_ATTEMPTS: ConfigOption[int] = (
        ConfigOptions.key("retry.max-attempts")
        .int_type()
        .default_value(10)
        .with_description("Maximum attempts of one remote call, including the first one.")
    )

    RETRY_BACKOFF_UNIT: ConfigOption[timedelta] = (
        ConfigOptions.key("retry.backoff-unit")
        .duration_type()
        .default_value(timedelta(milliseconds=100))
        .with_description("Time unit multiplied by the Fibonacci sequence between attempts.")
    )

    RETRY_MAX_DELAY: ConfigOption[timedelta] = (
        ConfigOptions.key("retry.max-delay")
        .duration_type()
        .default_value(timedelta(seconds=10))
        .with_description("Maximum single delay between two attempts.")
    )

    SPLIT_POLICY: ConfigOption[SplitPolicy] = (
        ConfigOptions.key("split.policy")
        .enum_type(SplitPolicy)
        .default_value(SplitPolicy.FULL_SEGMENT)
        .with_description("How splits are generated: full-segment or sampled-key-range.")
    )

    SCAN_SEGMENTS: ConfigOption[int] = (
        ConfigOptions.key("scan.segments")
        .int_type()
        .no_default_value()
        .with_description("Total scan segments. Derived from the table size when not set.")
    )

    SCAN_SEGMENT_TARGET_SIZE: ConfigOption[MemorySize] = (
        ConfigOptions.key("scan.segment.target-size")
        .memory_type()
        .default_value(MemorySize.of_gibi_bytes(1))
        .with_description("Target table bytes covered by one scan segment.")
    )

    SCAN_PARALLELISM: ConfigOption[int] = (
        ConfigOptions.key("scan.parallelism")
        .int_type()
        .default_value(1)
        .with_description("Maximum number of splits, one per parallel worker.")
    )

    ENDPOINT: ConfigOption[str] = (
        ConfigOptions.key("endpoint")
        .string_type()
        .no_default_value()
        .with_description("Overrides the store endpoint.")
    )

    REGION: ConfigOption[str] = (
        ConfigOptions.key("region")
        .string_type()
        .no_default_value()
        .with_description("Region of the store.")
    )

    def __init__(self, options: Options):
        self.options = options

    def set(self, key: ConfigOption, value):
        self.options.set(key, value)

    def contains(self, key: ConfigOption) -> bool:
        return self.options.contains(key)

    def copy(self) -> 'ExportOptions':
        return ExportOptions(self.options.copy())

    def to_map(self) -> dict:
        return self.options.to_map()

    @staticmethod
    def from_dict(options: dict) -> 'ExportOptions':
        return ExportOptions(Options(dict(options)))

    def required_string(self, key: ConfigOption[str]) -> str:
        value = self.options.get(key)
        if value is None or len(value.strip()) == 0:
            raise ConfigurationError(key.key())
        return value

    def required_long(self, key: ConfigOption[int]) -> int:
        if not self.options.contains(key):
            raise ConfigurationError(key.key())
        return self.options.get(key)

    def table_name(self, default=None) -> Optional[str]:
        return self.options.get(ExportOptions.TABLE_NAME, default)

    def index_name(self, default=None) -> Optional[str]:
        return self.options.get(ExportOptions.INDEX_NAME, default)

    def row_key_name(self, default=None) -> Optional[str]:
        return self.options.get(ExportOptions.ROW_KEY_NAME, default)

    def sort_key_name(self, default=None) -> Optional[str]:
        return self.options.get(ExportOptions.SORT_KEY_NAME, default)

    def row_sample_percent(self, default=None) -> float:
        return self.options.get(ExportOptions.ROW_SAMPLE_PERCENT, default)

    def row_key_space(self, default=None) -> int:
        return self.options.get(ExportOptions.ROW_KEY_SPACE, default)

    def attributes(self, default=None) -> Optional[List[str]]:
        attributes_csv = self.options.get(ExportOptions.ATTRIBUTES, default)
        if not attributes_csv or not attributes_csv.strip():
            return None
        return [name.strip() for name in attributes_csv.strip().split(",") if name.strip()]

    def throughput_read_percent(self, default=None) -> float:
        return self.options.get(ExportOptions.THROUGHPUT_READ_PERCENT, default)

    def read_capacity_units(self, default=None) -> Optional[float]:
        return self.options.get(ExportOptions.READ_CAPACITY_UNITS, default)

    def read_on_demand_capacity_units(self, default=None) -> float:
        return self.options.get(ExportOptions.READ_ON_DEMAND_CAPACITY_UNITS, default)

    def read_page_max_items(self, default=None) -> int:
        return self.options.get(ExportOptions.READ_PAGE_MAX_ITEMS, default)

    def read_page_max_size(self, default=None) -> int:
        return self.options.get(ExportOptions.READ_PAGE_MAX_SIZE, default).get_bytes()

    def read_capacity_unit_size(self, default=None) -> int:
        return self.options.get(ExportOptions.READ_CAPACITY_UNIT_SIZE, default).get_bytes()

    def read_rate_window(self, default=None) -> float:
        return self.options.get(ExportOptions.READ_RATE_WINDOW, default).total_seconds()

    def retry_max_attempts(self, default=None) -> int:
        return self.options.get(ExportOptions.RETRY_MAX_ATTEMPTS, default)

    def retry_backoff_unit(self, default=None) -> float:
        return self.options.get(ExportOptions.RETRY_BACKOFF_UNIT, default).total_seconds()

    def retry_max_delay(self, default=None) -> float:
        return self.options.get(ExportOptions.RETRY_MAX_DELAY, default).total_seconds()

    def split_policy(self, default=None) -> SplitPolicy:
        return self.options.get(ExportOptions.SPLIT_POLICY, default)

    def scan_segments(self, default=None) -> Optional[int]:
        return self.options.get(ExportOptions.SCAN_SEGMENTS, default)

    def scan_segment_target_size(self, default=None) -> int:
        return self.options.get(ExportOptions.SCAN_SEGMENT_TARGET_SIZE, default).get_bytes()

    def scan_parallelism(self, default=None) -> int:
        return self.options.get(ExportOptions.SCAN_PARALLELISM, default)

    def endpoint(self, default=None) -> Optional[str]:
        return self.options.get(ExportOptions.ENDPOINT, default)

    def region(self, default=None) -> Optional[str]:
        return self.options.get(ExportOptions.REGION, default)
