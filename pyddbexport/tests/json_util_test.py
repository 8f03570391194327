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
import unittest
from decimal import Decimal

from boto3.dynamodb.types import Binary

from pyddbexport.common.json_util import to_json_line


class JsonUtilTest(unittest.TestCase):

    def test_json_line(self):
        line = to_json_line({'b': Decimal('2'), 'a': Decimal('1.5'), 'tags': {'y', 'x'}, 'raw': b'\x00\x01'})
        self.assertEqual(line, '{"a": 1.5, "b": 2, "raw": "AAE=", "tags": ["x", "y"]}')

    def test_binary_value(self):
        self.assertEqual(json.loads(to_json_line({'raw': Binary(b'xy')})), {'raw': 'eHk='})


if __name__ == '__main__':
    unittest.main()
