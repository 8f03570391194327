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

from datetime import datetime, timedelta, timezone


def parse_duration(text: str) -> int:
    """Parse a duration expression such as ``100 ms`` or ``10 s`` into milliseconds."""
    if text is None:
        raise ValueError("text cannot be None")

    trimmed = text.strip().lower()
    if not trimmed:
        raise ValueError("argument is an empty- or whitespace-only string")

    pos = 0
    while pos < len(trimmed) and trimmed[pos].isdigit():
        pos += 1

    number_str = trimmed[:pos]
    unit_str = trimmed[pos:].strip()

    if not number_str:
        raise ValueError("text does not start with a number")

    value = int(number_str)

    if not unit_str:
        result_ms = value
    elif unit_str in ('ms', 'milli', 'millisecond', 'milliseconds'):
        result_ms = value
    elif unit_str in ('s', 'sec', 'second', 'seconds'):
        result_ms = value * 1000
    elif unit_str in ('m', 'min', 'minute', 'minutes'):
        result_ms = value * 60 * 1000
    elif unit_str in ('h', 'hour', 'hours'):
        result_ms = value * 60 * 60 * 1000
    else:
        supported_units = (
            'HOURS: (h | hour | hours), '
            'MINUTES: (m | min | minute | minutes), '
            'SECONDS: (s | sec | second | seconds), '
            'MILLISECONDS: (ms | milli | millisecond | milliseconds)'
        )
        raise ValueError(
            f"Time interval unit label '{unit_str}' does not match any of the recognized units: "
            f"{supported_units}"
        )

    return result_ms


def format_duration(duration: timedelta) -> str:
    return f"{int(duration.total_seconds() * 1000)} ms"


def to_epoch_seconds(date_time: str) -> int:
    """
    Convert an ISO-8601 timestamp such as ``2022-03-02T12:00:00`` to epoch seconds.
    Timestamps without an offset are read as UTC.
    """
    text = date_time.strip()
    if text.endswith('Z'):
        text = text[:-1] + '+00:00'
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return int(parsed.timestamp())
