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

"""
Byte sizes of options such as read.page.max-size. A size is written as a whole number
followed by an optional unit: "512" and "512 b" are bytes, "64k" or "64 kb" kibibytes,
then m/mb, g/gb and t/tb.
"""

import re

_SIZE_PATTERN = re.compile(r'^(\d+)\s*([a-zA-Z]*)$')

_UNITS = (
    (("", "b", "bytes"), 1),
    (("k", "kb", "kibibytes"), 1 << 10),
    (("m", "mb", "mebibytes"), 1 << 20),
    (("g", "gb", "gibibytes"), 1 << 30),
    (("t", "tb", "tebibytes"), 1 << 40),
)


class MemorySize:
    """A number of bytes, zero or larger."""

    def __init__(self, bytes: int):
        if bytes < 0:
            raise ValueError(f"bytes must be >= 0, got {bytes}")
        self.bytes = bytes

    @staticmethod
    def of_gibi_bytes(gibi_bytes: int) -> 'MemorySize':
        return MemorySize(gibi_bytes << 30)

    @staticmethod
    def of_mebi_bytes(mebi_bytes: int) -> 'MemorySize':
        return MemorySize(mebi_bytes << 20)

    @staticmethod
    def of_kibi_bytes(kibi_bytes: int) -> 'MemorySize':
        return MemorySize(kibi_bytes << 10)

    @staticmethod
    def of_bytes(bytes: int) -> 'MemorySize':
        return MemorySize(bytes)

    def get_bytes(self) -> int:
        return self.bytes

    def __eq__(self, other) -> bool:
        return isinstance(other, MemorySize) and self.bytes == other.bytes

    def __hash__(self) -> int:
        return hash(self.bytes)

    def __repr__(self) -> str:
        return f"MemorySize({self.bytes})"

    @staticmethod
    def parse(text: str) -> 'MemorySize':
        """
        Raises:
            ValueError: If the text is empty, malformed or has an unknown unit.
        """
        if text is None or not text.strip():
            raise ValueError("memory size must not be empty")
        match = _SIZE_PATTERN.match(text.strip())
        if not match:
            raise ValueError(f"cannot parse memory size: '{text}'")

        unit = match.group(2).lower()
        for names, multiplier in _UNITS:
            if unit in names:
                return MemorySize(int(match.group(1)) * multiplier)
        known = ", ".join(name for names, _ in _UNITS for name in names if name)
        raise ValueError(f"unknown memory size unit '{unit}', expected one of: {known}")
