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

import unittest
from unittest.mock import Mock

import boto3
from botocore.exceptions import ReadTimeoutError
from botocore.stub import Stubber

from pyddbexport.client.dynamodb_client import DynamoDBClient, translate_error
from pyddbexport.client.results import RequestLimit
from pyddbexport.client.retry import RetryEngine
from pyddbexport.common.exceptions import (ExhaustedRetriesError,
                                           FatalRemoteError,
                                           TransientRemoteError)
from pyddbexport.common.export_options import ExportOptions
from pyddbexport.filter import AttributeType, FilterOperator, IndexInfo, NAryFilter, QueryFilter


class DynamoDBClientTest(unittest.TestCase):

    def setUp(self):
        self.boto_client = boto3.client(
            'dynamodb', region_name='us-east-1', aws_access_key_id='testing', aws_secret_access_key='testing')
        self.stubber = Stubber(self.boto_client)
        self.sleeps = []
        self.client = DynamoDBClient(
            client=self.boto_client,
            retry_engine=RetryEngine(max_attempts=3, backoff_unit=0.1, sleep=self.sleeps.append))

    def tearDown(self):
        self.stubber.deactivate()

    def test_scan_segment(self):
        self.stubber.add_response('scan', {
            'Items': [{'id': {'S': 'a'}}],
            'Count': 1,
            'ScannedCount': 1,
            'LastEvaluatedKey': {'id': {'S': 'a'}},
            'ConsumedCapacity': {'TableName': 'events', 'CapacityUnits': 0.5},
        }, {
            'TableName': 'events',
            'ReturnConsumedCapacity': 'TOTAL',
            'ScanFilter': {'kind': {'ComparisonOperator': 'EQ', 'AttributeValueList': [{'S': 'click'}]}},
            'Segment': 2,
            'TotalSegments': 8,
            'ExclusiveStartKey': {'id': {'S': '0'}},
            'Limit': 25,
            'AttributesToGet': ['id', 'kind'],
        })
        query_filter = QueryFilter().add_scan_filter(NAryFilter("kind", FilterOperator.EQ, AttributeType.S, "click"))

        with self.stubber:
            result = self.client.scan('events', query_filter, {'id': {'S': '0'}}, RequestLimit(25, 8192),
                                      ['id', 'kind'], segment=2, total_segments=8)

        page = result.result
        self.assertEqual(result.retries, 0)
        self.assertEqual(page.items, [{'id': {'S': 'a'}}])
        self.assertEqual(page.next_cursor, {'id': {'S': 'a'}})
        self.assertEqual(page.consumed_capacity_units, 0.5)
        self.stubber.assert_no_pending_responses()

    def test_query_with_index(self):
        self.stubber.add_response('query', {
            'Items': [],
            'Count': 0,
            'ScannedCount': 0,
            'ConsumedCapacity': {'TableName': 'events', 'CapacityUnits': 0.5},
        }, {
            'TableName': 'events',
            'IndexName': 'by-bucket',
            'KeyConditions': {
                'created': {'ComparisonOperator': 'BETWEEN', 'AttributeValueList': [{'N': '1'}, {'N': '2'}]},
                'bucket': {'ComparisonOperator': 'EQ', 'AttributeValueList': [{'N': '7'}]},
            },
            'ReturnConsumedCapacity': 'TOTAL',
        })
        query_filter = QueryFilter(index=IndexInfo('by-bucket'))
        query_filter.add_key_condition(NAryFilter("created", FilterOperator.BETWEEN, AttributeType.N, 1, 2))
        query_filter.add_key_condition(NAryFilter("bucket", FilterOperator.EQ, AttributeType.N, 7))

        with self.stubber:
            page = self.client.query('events', query_filter, None, RequestLimit(), None).result

        self.assertEqual(page.items, [])
        self.assertIsNone(page.next_cursor)
        self.assertTrue(page.is_last)

    def test_throttling_is_retried(self):
        self.stubber.add_client_error('scan', service_error_code='ProvisionedThroughputExceededException',
                                      http_status_code=400)
        self.stubber.add_client_error('scan', service_error_code='ThrottlingException', http_status_code=400)
        self.stubber.add_response('scan', {'Items': [], 'Count': 0, 'ScannedCount': 0})

        with self.stubber:
            result = self.client.scan('events', None, None, RequestLimit(), None)

        self.assertEqual(result.retries, 2)
        self.assertEqual(result.result.consumed_capacity_units, 0.0)
        self.assertEqual([round(s, 6) for s in self.sleeps], [0.1, 0.1])

    def test_throttling_exhausts_retries(self):
        for _ in range(3):
            self.stubber.add_client_error('scan', service_error_code='ProvisionedThroughputExceededException',
                                          http_status_code=400)

        with self.stubber:
            with self.assertRaises(ExhaustedRetriesError) as context:
                self.client.scan('events', None, None, RequestLimit(), None)

        self.assertEqual(context.exception.retries, 2)
        self.assertEqual(context.exception.error_code, 'ProvisionedThroughputExceededException')

    def test_missing_table_is_fatal(self):
        self.stubber.add_client_error('scan', service_error_code='ResourceNotFoundException',
                                      service_message='Requested resource not found', http_status_code=400)

        with self.stubber:
            with self.assertRaises(FatalRemoteError) as context:
                self.client.scan('events', None, None, RequestLimit(), None)

        self.assertEqual(context.exception.error_code, 'ResourceNotFoundException')
        self.assertIn('Requested resource not found', str(context.exception))
        self.assertEqual(self.sleeps, [])

    def test_read_timeout_is_transient(self):
        error = translate_error(ReadTimeoutError(endpoint_url='http://localhost:8000'), 'Scan')
        self.assertIsInstance(error, TransientRemoteError)

        boto_client = Mock()
        boto_client.scan.side_effect = [ReadTimeoutError(endpoint_url='http://localhost:8000'),
                                        {'Items': [], 'Count': 0}]
        client = DynamoDBClient(client=boto_client, retry_engine=RetryEngine(sleep=self.sleeps.append))

        self.assertEqual(client.scan('events', None, None, RequestLimit(), None).retries, 1)

    def test_describe_provisioned_table(self):
        self.stubber.add_response('describe_table', {
            'Table': {
                'TableName': 'events',
                'ItemCount': 200,
                'TableSizeBytes': 40000,
                'ProvisionedThroughput': {'ReadCapacityUnits': 50, 'WriteCapacityUnits': 5},
            }
        }, {'TableName': 'events'})

        with self.stubber:
            description = self.client.describe_table('events')

        self.assertEqual(description.table_name, 'events')
        self.assertEqual(description.item_count, 200)
        self.assertEqual(description.size_bytes, 40000)
        self.assertEqual(description.read_capacity_units, 50.0)
        self.assertEqual(description.average_item_size, 200.0)

    def test_describe_on_demand_table(self):
        self.stubber.add_response('describe_table', {
            'Table': {
                'TableName': 'events',
                'ItemCount': 0,
                'TableSizeBytes': 0,
                'BillingModeSummary': {'BillingMode': 'PAY_PER_REQUEST'},
                'ProvisionedThroughput': {'ReadCapacityUnits': 0, 'WriteCapacityUnits': 0},
            }
        }, {'TableName': 'events'})

        with self.stubber:
            description = self.client.describe_table('events')

        self.assertEqual(description.read_capacity_units, 0.0)
        self.assertEqual(description.average_item_size, 0.0)

    def test_decode_item(self):
        item = {
            'id': {'N': '1'},
            'score': {'N': '1.5'},
            'name': {'S': 'a'},
            'tags': {'SS': ['b', 'a']},
            'blob': {'B': b'xy'},
            'nested': {'M': {'n': {'N': '2'}, 'l': {'L': [{'N': '3'}, {'BOOL': True}]}}},
            'missing': {'NULL': True},
        }

        self.assertEqual(self.client.decode_item(item), {
            'id': 1,
            'score': 1.5,
            'name': 'a',
            'tags': ['a', 'b'],
            'blob': b'xy',
            'nested': {'n': 2, 'l': [3, True]},
            'missing': None,
        })

    def test_from_options(self):
        options = ExportOptions.from_dict({'retry.max-attempts': '4', 'retry.backoff-unit': '50 ms'})
        client = DynamoDBClient.from_options(options, client=self.boto_client)

        self.assertEqual(client.retry_engine.max_attempts, 4)
        self.assertEqual(client.retry_engine.backoff_unit, 0.05)
        self.assertIs(client.client, self.boto_client)


if __name__ == '__main__':
    unittest.main()
