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

from parameterized import parameterized

from pyddbexport.client.retry import RetryEngine, fibonacci
from pyddbexport.common.exceptions import (ConfigurationError,
                                           ExhaustedRetriesError,
                                           FatalRemoteError,
                                           TransientRemoteError)


class RetryEngineTest(unittest.TestCase):

    def setUp(self):
        self.sleeps = []
        self.engine = RetryEngine(max_attempts=10, backoff_unit=0.1, max_delay=10.0, sleep=self.sleeps.append)

    def test_fibonacci(self):
        self.assertEqual([fibonacci(n) for n in range(1, 9)], [1, 1, 2, 3, 5, 8, 13, 21])

    def test_success_without_retry(self):
        result = self.engine.execute(lambda: "page")
        self.assertEqual(result.result, "page")
        self.assertEqual(result.retries, 0)
        self.assertEqual(self.sleeps, [])

    @parameterized.expand([(1,), (3,), (9,)])
    def test_retries_transient_failures(self, failures):
        operation = Mock(side_effect=[TransientRemoteError("throttled")] * failures + ["page"])

        result = self.engine.execute(operation)

        self.assertEqual(result.result, "page")
        self.assertEqual(result.retries, failures)
        self.assertEqual(operation.call_count, failures + 1)
        expected = [round(fibonacci(k) * 0.1, 6) for k in range(1, failures + 1)]
        self.assertEqual([round(s, 6) for s in self.sleeps], expected)

    def test_delay_capped(self):
        engine = RetryEngine(max_attempts=20, backoff_unit=1.0, max_delay=5.0, sleep=self.sleeps.append)
        self.assertEqual([engine.delay(k) for k in range(1, 8)], [1.0, 1.0, 2.0, 3.0, 5.0, 5.0, 5.0])

    def test_exhausted(self):
        last = TransientRemoteError("still throttled")
        operation = Mock(side_effect=[TransientRemoteError("throttled")] * 9 + [last])

        with self.assertRaises(ExhaustedRetriesError) as context:
            self.engine.execute(operation)

        self.assertEqual(context.exception.retries, 9)
        self.assertIs(context.exception.get_cause(), last)
        self.assertIn("9 retries", str(context.exception))
        self.assertIn("still throttled", str(context.exception))
        self.assertEqual(operation.call_count, 10)
        # no wait after the last attempt
        self.assertEqual(len(self.sleeps), 9)

    def test_fatal_not_retried(self):
        error = FatalRemoteError("no such table")
        operation = Mock(side_effect=error)

        with self.assertRaises(FatalRemoteError) as context:
            self.engine.execute(operation)

        self.assertIs(context.exception, error)
        self.assertEqual(operation.call_count, 1)
        self.assertEqual(self.sleeps, [])

    def test_configuration_error_not_retried(self):
        operation = Mock(side_effect=ConfigurationError("table-name"))

        with self.assertRaises(ConfigurationError):
            self.engine.execute(operation)
        self.assertEqual(operation.call_count, 1)

    def test_unexpected_error_is_fatal(self):
        operation = Mock(side_effect=KeyError("Items"))

        with self.assertRaises(FatalRemoteError) as context:
            self.engine.execute(operation, "scan")

        self.assertIsInstance(context.exception.get_cause(), KeyError)
        self.assertEqual(operation.call_count, 1)

    def test_invalid_attempts(self):
        with self.assertRaises(ValueError):
            RetryEngine(max_attempts=0)


if __name__ == '__main__':
    unittest.main()
