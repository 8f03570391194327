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

import base64
import json
from decimal import Decimal
from typing import Any, Dict


class ItemJsonEncoder(json.JSONEncoder):
    """
    Encodes decoded store rows as standard JSON: numbers stay numbers, sets become
    sorted lists and binary values become base64 strings.
    """

    def default(self, o: Any) -> Any:
        if isinstance(o, Decimal):
            return int(o) if o == o.to_integral_value() else float(o)
        if isinstance(o, (set, frozenset)):
            return sorted(o, key=lambda v: (type(v).__name__, v))
        if isinstance(o, (bytes, bytearray)):
            return base64.b64encode(bytes(o)).decode('ascii')
        if hasattr(o, 'value') and isinstance(getattr(o, 'value'), (bytes, bytearray)):
            return base64.b64encode(bytes(o.value)).decode('ascii')
        return super().default(o)


def to_json_line(item: Dict[str, Any]) -> str:
    return json.dumps(item, cls=ItemJsonEncoder, ensure_ascii=False, sort_keys=True)
