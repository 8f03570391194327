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

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from pyddbexport.client.results import (PageResult, RequestLimit,
                                        RetryResult, TableDescription)
from pyddbexport.client.retry import RetryEngine
from pyddbexport.filter.query_filter import QueryFilter


class RemoteClient(ABC):
    """
    Paginated access to a partitioned key-value table. Every page call goes through the
    retry engine and reports how many retries it needed.
    """

    def __init__(self, retry_engine: Optional[RetryEngine] = None):
        self.retry_engine = retry_engine or RetryEngine()

    def scan(self,
             table: str,
             query_filter: Optional[QueryFilter],
             cursor: Optional[Dict[str, Any]],
             limit: RequestLimit,
             attributes: Optional[List[str]],
             segment: Optional[int] = None,
             total_segments: Optional[int] = None) -> RetryResult[PageResult]:
        return self.retry_engine.execute(
            lambda: self._scan_once(table, query_filter, cursor, limit, attributes, segment, total_segments),
            f"scan of {table} segment {segment}/{total_segments}")

    def query(self,
              table: str,
              query_filter: QueryFilter,
              cursor: Optional[Dict[str, Any]],
              limit: RequestLimit,
              attributes: Optional[List[str]]) -> RetryResult[PageResult]:
        return self.retry_engine.execute(
            lambda: self._query_once(table, query_filter, cursor, limit, attributes),
            f"query of {table}")

    def describe_table(self, table: str) -> TableDescription:
        return self.retry_engine.execute(
            lambda: self._describe_table_once(table), f"describe of {table}").result

    def decode_item(self, item: Dict[str, Any]) -> Dict[str, Any]:
        """Convert an item as returned in a page into plain Python values."""
        return item

    def close(self):
        pass

    @abstractmethod
    def _scan_once(self,
                   table: str,
                   query_filter: Optional[QueryFilter],
                   cursor: Optional[Dict[str, Any]],
                   limit: RequestLimit,
                   attributes: Optional[List[str]],
                   segment: Optional[int],
                   total_segments: Optional[int]) -> PageResult:
        """Perform one scan call without retrying."""

    @abstractmethod
    def _query_once(self,
                    table: str,
                    query_filter: QueryFilter,
                    cursor: Optional[Dict[str, Any]],
                    limit: RequestLimit,
                    attributes: Optional[List[str]]) -> PageResult:
        """Perform one query call without retrying."""

    @abstractmethod
    def _describe_table_once(self, table: str) -> TableDescription:
        """Fetch the table metadata without retrying."""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
