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

from typing import Any, Dict, List

from pyddbexport.filter.attribute_type import AttributeType
from pyddbexport.filter.filter_operator import FilterOperator


class NAryFilter:
    """A condition on one column: an operator applied to zero or more typed values."""

    def __init__(self, column_name: str, operator: FilterOperator, column_type: AttributeType, *values: Any):
        if not column_name:
            raise ValueError("column_name must not be empty")
        operator = FilterOperator(operator)
        operator.validate_arity(len(values))
        self.column_name = column_name
        self.operator = operator
        self.column_type = AttributeType(column_type)
        self.values = tuple(str(v) if self.column_type == AttributeType.N else v for v in values)

    def condition(self) -> Dict[str, Any]:
        attribute_values: List[Dict[str, Any]] = [{self.column_type.value: v} for v in self.values]
        return {
            'ComparisonOperator': self.operator.value,
            'AttributeValueList': attribute_values,
        }

    def __repr__(self):
        return f"NAryFilter({self.column_name} {self.operator.value} {list(self.values)})"
