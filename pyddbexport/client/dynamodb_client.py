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
from decimal import Decimal
from typing import Any, Dict, List, Optional

import boto3
from boto3.dynamodb.types import Binary, TypeDeserializer
from botocore.config import Config
from botocore.exceptions import (BotoCoreError, ClientError,
                                 ConnectionClosedError, ConnectTimeoutError,
                                 EndpointConnectionError, ReadTimeoutError)

from pyddbexport.client.remote_client import RemoteClient
from pyddbexport.client.results import PageResult, RequestLimit, TableDescription
from pyddbexport.client.retry import RetryEngine
from pyddbexport.common.exceptions import (FatalRemoteError, RemoteError,
                                           TransientRemoteError)
from pyddbexport.common.export_options import ExportOptions
from pyddbexport.filter.query_filter import QueryFilter

logger = logging.getLogger(__name__)

# Error codes that indicate throttling or a soft server side failure.
RETRYABLE_CODES = {
    "ProvisionedThroughputExceededException",
    "ThrottlingException",
    "RequestLimitExceeded",
    "InternalServerError",
    "InternalFailure",
    "ServiceUnavailable",
    "LimitExceededException",
    "RequestTimeout",
}

TRANSIENT_TRANSPORT_ERRORS = (
    ReadTimeoutError,
    ConnectTimeoutError,
    EndpointConnectionError,
    ConnectionClosedError,
)


def _make_client(region: Optional[str], endpoint: Optional[str]):
    """Create a DynamoDB client with SDK retries turned off."""
    session = boto3.Session(region_name=region)
    cfg = Config(
        retries={"total_max_attempts": 1, "mode": "standard"},
        connect_timeout=10,
        read_timeout=60,
    )
    return session.client("dynamodb", endpoint_url=endpoint, config=cfg)


def translate_error(e: Exception, operation: str) -> RemoteError:
    if isinstance(e, ClientError):
        error = e.response.get("Error", {})
        code = error.get("Code", "Unknown")
        message = error.get("Message", str(e))
        if code in RETRYABLE_CODES:
            return TransientRemoteError("%s throttled or failed transiently (%s): %s", operation, code, message,
                                        cause=e, error_code=code)
        return FatalRemoteError("%s failed (%s): %s", operation, code, message, cause=e, error_code=code)
    if isinstance(e, TRANSIENT_TRANSPORT_ERRORS):
        return TransientRemoteError("%s transport failure: %s", operation, e, cause=e,
                                    error_code=type(e).__name__)
    return FatalRemoteError("%s failed: %s", operation, e, cause=e, error_code=type(e).__name__)


def normalize_value(value: Any) -> Any:
    """Turn deserialized attribute values into plain Python values."""
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, Binary):
        return value.value
    if isinstance(value, (set, frozenset)):
        return sorted((normalize_value(v) for v in value), key=lambda v: (type(v).__name__, v))
    if isinstance(value, dict):
        return {k: normalize_value(v) for k, v in value.items()}
    if isinstance(value, list):
        return [normalize_value(v) for v in value]
    return value


class DynamoDBClient(RemoteClient):
    """
    RemoteClient over the DynamoDB low-level API. Uses the legacy condition parameters
    (KeyConditions, ScanFilter, QueryFilter, AttributesToGet) that a QueryFilter maps onto.
    """

    def __init__(self,
                 client=None,
                 retry_engine: Optional[RetryEngine] = None,
                 region: Optional[str] = None,
                 endpoint: Optional[str] = None):
        super().__init__(retry_engine)
        self.client = client if client is not None else _make_client(region, endpoint)
        self._deserializer = TypeDeserializer()

    @staticmethod
    def from_options(options: ExportOptions, client=None) -> 'DynamoDBClient':
        retry_engine = RetryEngine(
            max_attempts=options.retry_max_attempts(),
            backoff_unit=options.retry_backoff_unit(),
            max_delay=options.retry_max_delay())
        return DynamoDBClient(client=client, retry_engine=retry_engine,
                              region=options.region(), endpoint=options.endpoint())

    def _scan_once(self,
                   table: str,
                   query_filter: Optional[QueryFilter],
                   cursor: Optional[Dict[str, Any]],
                   limit: RequestLimit,
                   attributes: Optional[List[str]],
                   segment: Optional[int],
                   total_segments: Optional[int]) -> PageResult:
        request: Dict[str, Any] = {"TableName": table, "ReturnConsumedCapacity": "TOTAL"}
        if query_filter is not None:
            # a scan has no key conditions, they are evaluated as filters instead
            scan_filter = dict(query_filter.key_conditions)
            scan_filter.update(query_filter.scan_filter)
            if scan_filter:
                request["ScanFilter"] = scan_filter
            if query_filter.index is not None:
                request["IndexName"] = query_filter.index.index_name
        if segment is not None and total_segments is not None:
            request["Segment"] = segment
            request["TotalSegments"] = total_segments
        self._apply_common(request, cursor, limit, attributes)

        logger.debug("Scan request: %s", request)
        try:
            response = self.client.scan(**request)
        except (ClientError, BotoCoreError) as e:
            raise translate_error(e, f"Scan of {table}") from e
        return self._to_page(response)

    def _query_once(self,
                    table: str,
                    query_filter: QueryFilter,
                    cursor: Optional[Dict[str, Any]],
                    limit: RequestLimit,
                    attributes: Optional[List[str]]) -> PageResult:
        request: Dict[str, Any] = {
            "TableName": table,
            "KeyConditions": query_filter.key_conditions,
            "ReturnConsumedCapacity": "TOTAL",
        }
        if query_filter.scan_filter:
            request["QueryFilter"] = query_filter.scan_filter
        if query_filter.index is not None:
            request["IndexName"] = query_filter.index.index_name
        self._apply_common(request, cursor, limit, attributes)

        logger.debug("Query request: %s", request)
        try:
            response = self.client.query(**request)
        except (ClientError, BotoCoreError) as e:
            raise translate_error(e, f"Query of {table}") from e
        return self._to_page(response)

    def _describe_table_once(self, table: str) -> TableDescription:
        try:
            description = self.client.describe_table(TableName=table)["Table"]
        except (ClientError, BotoCoreError) as e:
            raise translate_error(e, f"DescribeTable of {table}") from e

        billing_mode = description.get("BillingModeSummary", {}).get("BillingMode")
        if billing_mode == "PAY_PER_REQUEST":
            read_capacity_units = 0.0
        else:
            read_capacity_units = float(description.get("ProvisionedThroughput", {}).get("ReadCapacityUnits", 0))
        return TableDescription(
            table_name=description.get("TableName", table),
            item_count=int(description.get("ItemCount", 0)),
            size_bytes=int(description.get("TableSizeBytes", 0)),
            read_capacity_units=read_capacity_units)

    def decode_item(self, item: Dict[str, Any]) -> Dict[str, Any]:
        return {name: normalize_value(self._deserializer.deserialize(value)) for name, value in item.items()}

    def close(self):
        self.client.close()

    @staticmethod
    def _apply_common(request: Dict[str, Any],
                      cursor: Optional[Dict[str, Any]],
                      limit: RequestLimit,
                      attributes: Optional[List[str]]):
        if cursor:
            request["ExclusiveStartKey"] = cursor
        # the store caps every page at 1 MB on its own, max_bytes has no request parameter
        if limit.max_items > 0:
            request["Limit"] = limit.max_items
        if attributes:
            request["AttributesToGet"] = list(attributes)

    @staticmethod
    def _to_page(response: Dict[str, Any]) -> PageResult:
        consumed = response.get("ConsumedCapacity", {}).get("CapacityUnits", 0.0)
        return PageResult(
            items=response.get("Items", []),
            next_cursor=response.get("LastEvaluatedKey") or None,
            consumed_capacity_units=float(consumed))
