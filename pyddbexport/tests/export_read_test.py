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

import pyarrow as pa
from parameterized import parameterized

from pyddbexport import ExportOptions, ExportReadBuilder
from pyddbexport.client.results import TableDescription
from pyddbexport.common.exceptions import ConfigurationError
from pyddbexport.filter import AttributeType, FilterOperator, NAryFilter, QueryFilter
from pyddbexport.split.split import ReadMode
from pyddbexport.tests.fake_client import FakeRemoteClient


class ExportScanTest(unittest.TestCase):

    def test_full_segment_plan(self):
        client = FakeRemoteClient(description=TableDescription("events", 1000, 5 << 30, 200.0))
        options = ExportOptions.from_dict({'table-name': 'events', 'scan.parallelism': '2'})

        plan = ExportReadBuilder(client, options).new_scan().plan()

        splits = plan.splits()
        # 5 gb at 1 gb per segment
        self.assertEqual([split.segments for split in splits], [(0, 1, 2), (3, 4)])
        self.assertTrue(all(split.total_segments == 5 for split in splits))
        self.assertTrue(all(split.read_mode == ReadMode.SCAN for split in splits))
        # 200 units at the default 50 percent over 2 splits
        self.assertEqual([split.read_capacity_per_second for split in splits], [50.0, 50.0])
        self.assertEqual(plan.table_description().item_count, 1000)
        self.assertEqual(plan.total_segments(), 5)

    def test_segments_at_least_workers(self):
        client = FakeRemoteClient(description=TableDescription("events", 10, 100, 10.0))
        options = ExportOptions.from_dict({'table-name': 'events'})

        plan = ExportReadBuilder(client, options).with_parallelism(4).new_scan().plan()

        self.assertEqual(len(plan.splits()), 4)
        self.assertEqual(plan.total_segments(), 4)

    def test_configured_segments_and_capacity(self):
        client = FakeRemoteClient(description=TableDescription("events", 10, 100, 0.0))
        options = ExportOptions.from_dict({
            'table-name': 'events',
            'scan.segments': '8',
            'scan.parallelism': '3',
            'read.capacity-units': '300',
            'throughput.read-percent': '1.0',
        })

        splits = ExportReadBuilder(client, options).new_scan().plan().splits()

        self.assertEqual([split.segment_count for split in splits], [3, 3, 2])
        self.assertEqual([split.read_capacity_per_second for split in splits], [100.0, 100.0, 100.0])

    def test_on_demand_capacity(self):
        client = FakeRemoteClient(description=TableDescription("events", 10, 100, 0.0))
        options = ExportOptions.from_dict({'table-name': 'events', 'read.on-demand-capacity-units': '1000'})

        splits = ExportReadBuilder(client, options).new_scan().plan().splits()

        self.assertEqual(splits[0].read_capacity_per_second, 500.0)

    def test_sampled_key_range_plan(self):
        client = FakeRemoteClient()
        options = ExportOptions.from_dict({
            'table-name': 'events',
            'split.policy': 'sampled-key-range',
            'index-name': 'by-bucket',
            'row-key.name': 'bucket',
            'sort-key.name': 'created',
            'sort-key.min-value': '1',
            'sort-key.max-value': '2',
            'scan.parallelism': '4',
        })

        splits = ExportReadBuilder(client, options).new_scan().plan().splits()

        self.assertEqual([split.segments for split in splits], [(1, 2, 3), (4, 5, 6), (7, 8), (9, 10)])
        self.assertTrue(all(split.read_mode == ReadMode.QUERY for split in splits))
        self.assertEqual(splits[0].read_capacity_per_second, 12.5)

    def test_invalid_settings_make_no_remote_call(self):
        client = FakeRemoteClient()
        options = ExportOptions.from_dict({'table-name': 'events', 'split.policy': 'sampled-key-range'})

        with self.assertRaises(ConfigurationError) as context:
            ExportReadBuilder(client, options).new_scan().plan()

        self.assertEqual(context.exception.option, 'index-name')
        self.assertEqual(client.calls, [])

    @parameterized.expand([
        ('throughput.read-percent', 'half'),
        ('scan.parallelism', 'two'),
        ('read.capacity-units', 'lots'),
        ('read.capacity-units', '0'),
        ('read.on-demand-capacity-units', '-1'),
    ])
    def test_malformed_value_is_a_configuration_error(self, key, value):
        client = FakeRemoteClient()
        options = ExportOptions.from_dict({'table-name': 'events', key: value})

        with self.assertRaises(ConfigurationError) as context:
            ExportReadBuilder(client, options).new_scan().plan()

        self.assertEqual(context.exception.option, key)
        self.assertIn(key, str(context.exception))
        self.assertEqual(client.calls, [])

    def test_missing_table_name(self):
        with self.assertRaises(ConfigurationError) as context:
            ExportReadBuilder(FakeRemoteClient(), ExportOptions.from_dict({})).new_scan().plan()
        self.assertEqual(context.exception.option, 'table-name')


class ExportReadTest(unittest.TestCase):

    def setUp(self):
        self.client = FakeRemoteClient(
            scan_pages={
                0: [[{'id': 1, 'kind': 'click'}], [{'id': 2, 'kind': 'view', 'extra': True}]],
                1: [[{'id': 3, 'kind': 'click'}]],
            },
            query_pages={
                '1': [[{'id': 10}]],
                '2': [[{'id': 20}], [{'id': 21}]],
            },
            description=TableDescription("events", 4, 400, 100.0))

    def _builder(self, **extra) -> ExportReadBuilder:
        options = {'table-name': 'events', 'scan.segments': '2', 'scan.parallelism': '2'}
        options.update(extra)
        return ExportReadBuilder(self.client, ExportOptions.from_dict(options))

    def test_to_iterator(self):
        builder = self._builder()
        plan = builder.new_scan().plan()

        rows = list(builder.new_read(plan.table_description()).to_iterator(plan.splits()))

        self.assertEqual(sorted(row['id'] for row in rows), [1, 2, 3])

    def test_to_arrow_unions_attributes(self):
        builder = self._builder()
        plan = builder.new_scan().plan()

        table = builder.new_read(plan.table_description()).to_arrow(plan.splits())

        self.assertEqual(table.num_rows, 3)
        self.assertEqual(table.column_names, ['id', 'kind', 'extra'])
        self.assertEqual(table.column('extra').to_pylist(), [None, True, None])

    def test_to_pandas(self):
        builder = self._builder()
        plan = builder.new_scan().plan()

        df = builder.new_read().to_pandas(plan.splits())

        self.assertEqual(sorted(df['id'].tolist()), [1, 2, 3])

    def test_projection_and_filter(self):
        template = QueryFilter().add_scan_filter(NAryFilter("kind", FilterOperator.EQ, AttributeType.S, "click"))
        builder = self._builder().with_projection(['id']).with_filter(template)
        plan = builder.new_scan().plan()

        list(builder.new_read().to_iterator(plan.splits()))

        for call in self.client.remote_calls("scan"):
            self.assertEqual(call[5], ['id'])
            self.assertEqual(call[2].scan_filter, template.scan_filter)

    def test_empty_table_to_arrow(self):
        self.client.scan_pages = {}
        builder = self._builder()
        plan = builder.new_scan().plan()

        table = builder.new_read().to_arrow(plan.splits())

        self.assertEqual(table.num_rows, 0)
        self.assertIsInstance(table, pa.Table)

    def test_sampled_key_range_read(self):
        builder = self._builder(**{
            'split.policy': 'sampled-key-range',
            'index-name': 'by-bucket',
            'row-key.name': 'bucket',
            'sort-key.name': 'created',
            'sort-key.min-value': '1',
            'sort-key.max-value': '2',
            'row-key.space': '2',
            'row-sample.percent': '1',
        })
        plan = builder.new_scan().plan()

        rows = list(builder.new_read(plan.table_description()).to_iterator(plan.splits()))

        self.assertEqual([row['id'] for row in rows], [10, 20, 21])
        queried = [call[2].key_conditions['bucket']['AttributeValueList'][0]['N']
                   for call in self.client.remote_calls("query")]
        self.assertEqual(queried, ['1', '2', '2'])


if __name__ == '__main__':
    unittest.main()
