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

"""
Module to read an exported table into a Ray Dataset, by using the Ray Datasource API.
"""
import heapq
import logging
from functools import partial
from typing import Iterable, List, Optional

import pyarrow
from ray.data.datasource import Datasource

from pyddbexport.split.split import Split

logger = logging.getLogger(__name__)


class ExportDatasource(Datasource):
    """
    Ray Data Datasource reading the splits of an export plan, one read task per chunk of
    splits. Every task builds its own client, so its read capacity is the sum of the
    shares planned for its splits.
    """

    def __init__(self, export_read, splits: List[Split]):
        """
        Args:
            export_read: ExportRead whose options, projection and client factory are used
            splits: List of splits to read
        """
        self.export_read = export_read
        self.splits = splits

    def get_name(self) -> str:
        return f"ExportTable({self.export_read.options.table_name()})"

    def estimate_inmemory_data_size(self) -> Optional[int]:
        description = self.export_read.table_description
        if description is None or description.size_bytes <= 0:
            return None
        planned_segments = sum(split.segment_count for split in self.splits)
        total_segments = max(split.total_segments for split in self.splits) if self.splits else 0
        if total_segments <= 0:
            return None
        return int(description.size_bytes * planned_segments / total_segments)

    @staticmethod
    def _distribute_splits_into_equal_chunks(splits: Iterable[Split], n_chunks: int) -> List[List[Split]]:
        """
        Greedy distribution of the splits across tasks, by number of segments.
        """
        chunks = [list() for _ in range(n_chunks)]
        chunk_sizes = [(0, chunk_id) for chunk_id in range(n_chunks)]
        heapq.heapify(chunk_sizes)

        # From largest to smallest, add the splits to the smallest chunk one at a time
        for split in sorted(splits, key=lambda s: s.segment_count, reverse=True):
            smallest_chunk = heapq.heappop(chunk_sizes)
            chunks[smallest_chunk[1]].append(split)
            heapq.heappush(chunk_sizes, (smallest_chunk[0] + split.segment_count, smallest_chunk[1]))

        return chunks

    def get_read_tasks(self, parallelism: int, **kwargs) -> List:
        """Return a list of read tasks that can be executed in parallel."""
        from ray.data.block import BlockMetadata
        from ray.data.datasource import ReadTask

        if parallelism < 1:
            raise ValueError(f"parallelism must be at least 1, got {parallelism}")

        if parallelism > len(self.splits):
            parallelism = len(self.splits)
            logger.warning("Reducing the parallelism to %d, as that is the number of splits", parallelism)

        options = self.export_read.options
        projection = self.export_read.projection
        table_description = self.export_read.table_description
        client_factory = self.export_read.client_factory

        def _get_read_task(
            splits: List[Split],
            options=options,
            projection=projection,
            table_description=table_description,
            client_factory=client_factory,
        ) -> Iterable[pyarrow.Table]:
            """Read function that will be executed by Ray workers."""
            from pyddbexport.read.export_read import ExportRead

            client = client_factory()
            try:
                worker_read = ExportRead(client, options, projection, table_description, client_factory)
                return [worker_read.to_arrow(splits)]
            finally:
                client.close()

        # Use partial to create read function without capturing self
        get_read_task = partial(
            _get_read_task,
            options=options,
            projection=projection,
            table_description=table_description,
            client_factory=client_factory,
        )

        read_tasks = []
        for chunk_splits in self._distribute_splits_into_equal_chunks(self.splits, parallelism):
            if not chunk_splits:
                continue

            metadata = BlockMetadata(
                num_rows=None,
                size_bytes=None,
                input_files=None,
                exec_stats=None,
            )
            read_tasks.append(
                ReadTask(
                    read_fn=lambda splits=chunk_splits: get_read_task(splits),
                    metadata=metadata,
                )
            )

        return read_tasks
