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

from typing import Any, Optional


class ExportException(Exception):
    """Base exception of pyddbexport."""

    def __init__(self, message: str = None, *args: Any, cause: Optional[BaseException] = None):
        if message and args:
            try:
                formatted_message = message % args
            except (TypeError, ValueError):
                formatted_message = f"{message} {' '.join(str(arg) for arg in args)}"
        else:
            formatted_message = message or "export error occurred"

        super().__init__(formatted_message)
        self.__cause__ = cause

    def get_cause(self) -> Optional[BaseException]:
        return self.__cause__

    def __repr__(self) -> str:
        if self.__cause__:
            return f"{self.__class__.__name__}('{self}', caused by {type(self.__cause__).__name__}: {self.__cause__})"
        return f"{self.__class__.__name__}('{self}')"


class ConfigurationError(ExportException):
    """A required setting is missing or invalid. Never retried."""

    def __init__(self, option: str, message: str = None):
        self.option = option
        super().__init__(message or f"required job config not found: {option}")


class RemoteError(ExportException):
    """Failure reported by, or while talking to, the remote store."""

    def __init__(self, message: str = None, *args: Any, cause: Optional[BaseException] = None,
                 error_code: Optional[str] = None):
        self.error_code = error_code
        super().__init__(message, *args, cause=cause)


class TransientRemoteError(RemoteError):
    """Throttling, capacity exceeded or transport timeout. Retried by the retry engine."""


class FatalRemoteError(RemoteError):
    """Permission, malformed request, missing table or index. Never retried."""


class ExhaustedRetriesError(RemoteError):
    """A transient failure that kept happening until the retry budget ran out."""

    def __init__(self, retries: int, cause: BaseException):
        self.retries = retries
        super().__init__("Retries exhausted after %s retries, last failure: %s", retries, cause,
                         cause=cause,
                         error_code=getattr(cause, 'error_code', None))


class SegmentFailure(ExportException):
    """Terminal failure of one unit of work, surfaced to the host framework."""

    def __init__(self, segment: int, cursor: Optional[Any], cause: BaseException):
        self.segment = segment
        self.cursor = cursor
        super().__init__("Failed to read segment %s: %s", segment, cause, cause=cause)
