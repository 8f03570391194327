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

from typing import Callable, List, Optional

from pyddbexport.client.remote_client import RemoteClient
from pyddbexport.client.results import TableDescription
from pyddbexport.common.export_options import ExportOptions
from pyddbexport.filter.query_filter import QueryFilter
from pyddbexport.read.export_read import ExportRead
from pyddbexport.read.export_scan import ExportScan


class ExportReadBuilder:
    """Entry point of an export: configure, then plan with new_scan() and read with new_read()."""

    def __init__(self, client: RemoteClient, options: ExportOptions):
        self.client = client
        self.options = options
        self._filter: Optional[QueryFilter] = None
        self._projection: Optional[List[str]] = None
        self._parallelism: Optional[int] = None

    def with_filter(self, query_filter: QueryFilter) -> 'ExportReadBuilder':
        self._filter = query_filter
        return self

    def with_projection(self, projection: List[str]) -> 'ExportReadBuilder':
        self._projection = projection
        return self

    def with_parallelism(self, parallelism: int) -> 'ExportReadBuilder':
        self._parallelism = parallelism
        return self

    def new_scan(self) -> ExportScan:
        return ExportScan(
            client=self.client,
            options=self.options,
            query_filter=self._filter,
            parallelism=self._parallelism)

    def new_read(self,
                 table_description: Optional[TableDescription] = None,
                 client_factory: Optional[Callable[[], RemoteClient]] = None) -> ExportRead:
        """client_factory builds the clients of remote read tasks, DynamoDB by default."""
        return ExportRead(
            client=self.client,
            options=self.options,
            projection=self._projection or self.options.attributes(),
            table_description=table_description,
            client_factory=client_factory)
