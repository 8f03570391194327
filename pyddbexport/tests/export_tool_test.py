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

import json
import os
import shutil
import tempfile
import unittest
from unittest import mock

from pyddbexport.common.exceptions import FatalRemoteError
from pyddbexport.tests.fake_client import FakeRemoteClient
from pyddbexport.tools.export import build_options, main, parse_args


class ExportToolTest(unittest.TestCase):

    def setUp(self):
        self.tempdir = tempfile.mkdtemp()
        self.output_path = os.path.join(self.tempdir, 'out')
        self.clients = []

    def tearDown(self):
        shutil.rmtree(self.tempdir, ignore_errors=True)

    def _factory(self, **kwargs):
        def create(options):
            client = FakeRemoteClient(**kwargs)
            client.options = options
            self.clients.append(client)
            return client
        return create

    def _read_part(self, name):
        with open(os.path.join(self.output_path, name), encoding='utf-8') as f:
            return [json.loads(line) for line in f]

    def test_sampled_key_range_export(self):
        factory = self._factory(query_pages={'1': [[{'id': 10, 'created': 1646222500}]],
                                             '2': [[{'id': 20}], [{'id': 21}]]})

        code = main([
            '--table_name', 'events',
            '--index_name', 'by-bucket',
            '--row_key', 'bucket',
            '--sort_key', 'created',
            '--min_sort_key', '2022-03-02T12:00:00',
            '--max_sort_key', '2022-03-03T12:00:00',
            '--sample_percent', '0.0002',
            '--attributes', 'id,created',
            '--workers', '2',
            '--output_path', self.output_path,
        ], factory)

        self.assertEqual(code, 0)
        self.assertEqual(sorted(os.listdir(self.output_path)), ['_SUCCESS', 'part-00000', 'part-00001'])
        self.assertEqual(self._read_part('part-00000'), [{'created': 1646222500, 'id': 10}])
        self.assertEqual(self._read_part('part-00001'), [{'id': 20}, {'id': 21}])

        client = self.clients[0]
        self.assertTrue(client.closed)
        query_filter = client.remote_calls("query")[0][2]
        self.assertEqual(query_filter.key_conditions['created']['AttributeValueList'],
                         [{'N': '1646222400'}, {'N': '1646308800'}])
        self.assertEqual(query_filter.index.index_name, 'by-bucket')
        self.assertEqual(client.remote_calls("query")[0][5], ['id', 'created'])

    def test_full_scan_export(self):
        factory = self._factory(scan_pages={0: [[{'id': 1}]], 1: [[{'id': 2}, {'id': 3}]]})

        code = main(['--table_name', 'events', '--workers', '2', '--output_path', self.output_path], factory)

        self.assertEqual(code, 0)
        self.assertEqual(self._read_part('part-00000'), [{'id': 1}])
        self.assertEqual(self._read_part('part-00001'), [{'id': 2}, {'id': 3}])
        self.assertTrue(os.path.exists(os.path.join(self.output_path, '_SUCCESS')))

    def test_failure_exit_code(self):
        factory = self._factory(scan_pages={0: [[{'id': 1}]]}, failures=[FatalRemoteError("access denied")])

        code = main(['--table_name', 'events', '--output_path', self.output_path], factory)

        self.assertEqual(code, 1)
        self.assertFalse(os.path.exists(os.path.join(self.output_path, '_SUCCESS')))

    def test_missing_setting_exit_code(self):
        factory = self._factory()

        code = main(['--table_name', 'events', '--index_name', 'by-bucket', '--output_path', self.output_path],
                    factory)

        self.assertEqual(code, 1)
        self.assertEqual(self.clients[0].calls, [])

    def test_invalid_timestamp_exit_code(self):
        code = main(['--table_name', 'events', '--index_name', 'by-bucket', '--min_sort_key', 'yesterday',
                     '--output_path', self.output_path], self._factory())
        self.assertEqual(code, 1)
        self.assertEqual(self.clients, [])

    def test_invalid_read_ratio_exit_code(self):
        code = main(['--table_name', 'events', '--read_ratio', '0', '--output_path', self.output_path],
                    self._factory())

        self.assertEqual(code, 1)
        self.assertEqual(self.clients[0].calls, [])

    def test_ray_export_uses_injected_client_factory(self):
        with mock.patch('pyddbexport.tools.export.export_ray') as export_ray:
            code = main(['--table_name', 'events', '--ray', '--output_path', self.output_path], self._factory())

        self.assertEqual(code, 0)
        export_read = export_ray.call_args[0][0]
        task_client = export_read.client_factory()
        self.assertIsInstance(task_client, FakeRemoteClient)
        self.assertIsNot(task_client, self.clients[0])
        self.assertEqual(task_client.options.table_name(), 'events')

    def test_build_options(self):
        args = parse_args(['--table_name', 'events', '--output_path', self.output_path, '--read_ratio', '0.25',
                           '--dynamo_endpoint', 'http://localhost:8000', '--region', 'eu-west-1'])
        options = build_options(args)

        self.assertEqual(options.table_name(), 'events')
        self.assertEqual(options.throughput_read_percent(), 0.25)
        self.assertEqual(options.endpoint(), 'http://localhost:8000')
        self.assertEqual(options.region(), 'eu-west-1')
        self.assertEqual(options.scan_parallelism(), 1)


if __name__ == '__main__':
    unittest.main()
