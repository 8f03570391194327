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

import threading
from functools import partial
from typing import Any, Callable, Dict, Iterator, List, Optional

import pandas
import pyarrow

from pyddbexport.client.remote_client import RemoteClient
from pyddbexport.client.results import TableDescription
from pyddbexport.common.export_options import ExportOptions
from pyddbexport.read.progress_reporter import NoOpReporter, ProgressReporter
from pyddbexport.read.rate_controller import RateController, capacity_per_item
from pyddbexport.read.read_context import ReadContext
from pyddbexport.read.read_manager import ReadCheckpoint, ReadManager
from pyddbexport.split.split import Split


def default_client_factory(options: ExportOptions) -> RemoteClient:
    from pyddbexport.client.dynamodb_client import DynamoDBClient

    return DynamoDBClient.from_options(options)


class ExportRead:
    """Reads planned splits into rows, Arrow tables, pandas data frames or a Ray dataset."""

    def __init__(self,
                 client: RemoteClient,
                 options: ExportOptions,
                 projection: Optional[List[str]] = None,
                 table_description: Optional[TableDescription] = None,
                 client_factory: Optional[Callable[[], RemoteClient]] = None):
        self.client = client
        self.options = options
        self.projection = projection
        self.table_description = table_description
        self.client_factory = client_factory or partial(default_client_factory, options)

    def new_rate_controller(self, split: Split, cancel_event: Optional[threading.Event] = None) -> RateController:
        capacity = split.read_capacity_per_second
        if capacity is None:
            capacity = self.options.read_on_demand_capacity_units() * self.options.throughput_read_percent()
        unit_bytes = self.options.read_capacity_unit_size()
        average_item_size = self.table_description.average_item_size if self.table_description else 0.0
        return RateController(
            capacity,
            window=self.options.read_rate_window(),
            max_items=self.options.read_page_max_items(),
            max_bytes=self.options.read_page_max_size(),
            capacity_unit_bytes=unit_bytes,
            initial_capacity_per_item=capacity_per_item(average_item_size, unit_bytes),
            cancel_event=cancel_event)

    def new_manager(self,
                    split: Split,
                    reporter: Optional[ProgressReporter] = None,
                    checkpoint: Optional[ReadCheckpoint] = None) -> ReadManager:
        reporter = reporter or NoOpReporter()
        context = ReadContext(
            options=self.options,
            client=self.client,
            split=split,
            rate_controller=self.new_rate_controller(split, reporter.cancel_event),
            reporter=reporter,
            attributes=self.projection)
        return ReadManager(context, checkpoint)

    def to_iterator(self, splits: List[Split]) -> Iterator[Dict[str, Any]]:
        def _record_generator():
            for split in splits:
                yield from self.new_manager(split).read()

        return _record_generator()

    def to_arrow(self, splits: List[Split]) -> pyarrow.Table:
        return self.rows_to_arrow(list(self.to_iterator(splits)), self.projection)

    def to_pandas(self, splits: List[Split]) -> pandas.DataFrame:
        return self.to_arrow(splits).to_pandas()

    def to_ray(self, splits: List[Split], parallelism: Optional[int] = None) -> "ray.data.dataset.Dataset":
        import ray

        from pyddbexport.read.ray_datasource import ExportDatasource

        return ray.data.read_datasource(
            ExportDatasource(self, splits),
            override_num_blocks=parallelism or len(splits))

    @staticmethod
    def rows_to_arrow(rows: List[Dict[str, Any]], columns: Optional[List[str]] = None) -> pyarrow.Table:
        """Build a table whose columns are the union of the row attributes, in first seen order."""
        names = list(columns) if columns else []
        seen = set(names)
        for row in rows:
            for name in row:
                if name not in seen:
                    seen.add(name)
                    names.append(name)
        return pyarrow.Table.from_pydict({name: [row.get(name) for row in rows] for name in names})
