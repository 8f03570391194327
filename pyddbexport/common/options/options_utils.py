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

from datetime import timedelta
from enum import Enum
from typing import Any, Type

from pyddbexport.common.memory_size import MemorySize
from pyddbexport.common.time_utils import format_duration, parse_duration


class OptionsUtils:
    """Utility methods for options conversion and validation."""

    @staticmethod
    def convert_value(value: Any, target_type: Type) -> Any:
        """
        Convert a value to the target type.

        Args:
            value: The value to convert
            target_type: The target type to convert to

        Returns:
            The converted value

        Raises:
            ValueError: If the conversion is not possible
        """
        if value is None:
            return None

        # bool is a subclass of int, never let it pass as a number
        if isinstance(value, target_type) and not isinstance(value, bool):
            return value

        if isinstance(target_type, type) and issubclass(target_type, Enum):
            return OptionsUtils.convert_to_enum(value, target_type)

        if target_type == str:
            return OptionsUtils.convert_to_string(value)
        elif target_type == int:
            return OptionsUtils.convert_to_int(value)
        elif target_type == float:
            return OptionsUtils.convert_to_double(value)
        elif target_type == MemorySize:
            return OptionsUtils.convert_to_memory_size(value)
        elif target_type == timedelta:
            return OptionsUtils.convert_to_duration(value)
        else:
            raise ValueError(f"Unsupported type: {target_type}")

    @staticmethod
    def convert_to_string(value: Any) -> str:
        if isinstance(value, Enum):
            return str(value.value)
        if isinstance(value, timedelta):
            return format_duration(value)
        return str(value)

    @staticmethod
    def convert_to_int(value: Any) -> int:
        if isinstance(value, bool):
            raise ValueError(f"Cannot convert {type(value)} to int")
        if isinstance(value, int):
            return value
        if isinstance(value, str):
            return int(value.strip())
        if isinstance(value, float):
            return int(value)
        raise ValueError(f"Cannot convert {type(value)} to int")

    @staticmethod
    def convert_to_double(value: Any) -> float:
        if isinstance(value, bool):
            raise ValueError(f"Cannot convert {type(value)} to float")
        if isinstance(value, float):
            return value
        if isinstance(value, str):
            return float(value.strip())
        if isinstance(value, int):
            return float(value)
        raise ValueError(f"Cannot convert {type(value)} to float")

    @staticmethod
    def convert_to_memory_size(value: Any) -> MemorySize:
        if isinstance(value, MemorySize):
            return value
        if isinstance(value, str):
            return MemorySize.parse(value)
        if isinstance(value, int) and not isinstance(value, bool):
            return MemorySize.of_bytes(value)
        raise ValueError(f"Cannot convert {type(value)} to MemorySize")

    @staticmethod
    def convert_to_duration(value: Any) -> timedelta:
        if isinstance(value, timedelta):
            return value
        if isinstance(value, str):
            return timedelta(milliseconds=parse_duration(value))
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return timedelta(milliseconds=value)
        raise ValueError(f"Cannot convert {type(value)} to timedelta")

    @staticmethod
    def convert_to_enum(value: Any, enum_class: Type[Enum]) -> Enum:
        if isinstance(value, enum_class):
            return value

        if isinstance(value, str):
            value_lower = value.lower().strip()
            for enum_member in enum_class:
                if str(enum_member.value).lower() == value_lower:
                    return enum_member
            try:
                return enum_class[value.strip().upper().replace('-', '_')]
            except KeyError:
                raise ValueError(
                    f"Cannot convert '{value}' to {enum_class.__name__}. "
                    f"Valid values: {[e.value for e in enum_class]}"
                )
        raise ValueError(f"Cannot convert {type(value)} to {enum_class.__name__}")
