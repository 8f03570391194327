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

from enum import Enum


class FilterOperator(str, Enum):
    """
    Comparison operators understood by the store, with the number of values each one takes.
    """
    EQ = "EQ"
    NE = "NE"
    LE = "LE"
    LT = "LT"
    GE = "GE"
    GT = "GT"
    BETWEEN = "BETWEEN"
    IN = "IN"
    BEGINS_WITH = "BEGINS_WITH"
    NULL = "NULL"
    NOT_NULL = "NOT_NULL"
    CONTAINS = "CONTAINS"
    NOT_CONTAINS = "NOT_CONTAINS"

    def validate_arity(self, count: int):
        if self in (FilterOperator.NULL, FilterOperator.NOT_NULL):
            expected_ok = count == 0
            expected = "no values"
        elif self == FilterOperator.BETWEEN:
            expected_ok = count == 2
            expected = "exactly 2 values"
        elif self == FilterOperator.IN:
            expected_ok = count >= 1
            expected = "at least 1 value"
        else:
            expected_ok = count == 1
            expected = "exactly 1 value"
        if not expected_ok:
            raise ValueError(f"Operator {self.value} expects {expected}, got {count}")
