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
import time
from typing import Callable, Optional, TypeVar

from pyddbexport.client.results import RetryResult
from pyddbexport.common.exceptions import (ConfigurationError,
                                           ExhaustedRetriesError,
                                           FatalRemoteError,
                                           TransientRemoteError)

T = TypeVar('T')

logger = logging.getLogger(__name__)


def fibonacci(n: int) -> int:
    """Return the n-th Fibonacci number, 1-based: 1, 1, 2, 3, 5, ..."""
    a, b = 0, 1
    for _ in range(n):
        a, b = b, a + b
    return a


class RetryEngine:
    """Retries transient remote failures with a capped Fibonacci backoff.

    Only TransientRemoteError is retried. ConfigurationError and FatalRemoteError propagate
    unchanged, any other exception is wrapped into a FatalRemoteError. The number of retries
    that were needed is returned with the result so that callers can adapt their pace.

    Example:
        >>> engine = RetryEngine(max_attempts=10, backoff_unit=0.1)
        >>> page = engine.execute(lambda: client.scan_once(...)).result
    """

    def __init__(self,
                 max_attempts: int = 10,
                 backoff_unit: float = 0.1,
                 max_delay: float = 10.0,
                 sleep: Callable[[float], None] = time.sleep):
        """
        Args:
            max_attempts: Maximum attempts including the first one
            backoff_unit: Seconds multiplied by the Fibonacci sequence
            max_delay: Maximum single delay (seconds)
            sleep: Function used to wait between attempts
        """
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")
        self.max_attempts = max_attempts
        self.backoff_unit = backoff_unit
        self.max_delay = max_delay
        self._sleep = sleep

    def delay(self, retry: int) -> float:
        return min(fibonacci(retry) * self.backoff_unit, self.max_delay)

    def execute(self, operation: Callable[[], T], description: Optional[str] = None) -> RetryResult[T]:
        description = description or getattr(operation, '__name__', 'remote call')
        last_exception: Optional[TransientRemoteError] = None

        for attempt in range(1, self.max_attempts + 1):
            try:
                result = operation()
                if attempt > 1:
                    logger.info("%s succeeded after %d retries", description, attempt - 1)
                return RetryResult(result=result, retries=attempt - 1)
            except TransientRemoteError as e:
                last_exception = e
                if attempt >= self.max_attempts:
                    break
                delay = self.delay(attempt)
                logger.warning("%s failed (attempt %d/%d), retrying in %.2fs: %s",
                               description, attempt, self.max_attempts, delay, e)
                self._sleep(delay)
            except (ConfigurationError, FatalRemoteError):
                raise
            except Exception as e:
                raise FatalRemoteError("%s failed: %s", description, e, cause=e) from e

        logger.error("%s failed, maximum attempts reached: %d", description, self.max_attempts)
        raise ExhaustedRetriesError(self.max_attempts - 1, last_exception) from last_exception
