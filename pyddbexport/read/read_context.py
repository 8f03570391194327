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

from dataclasses import dataclass, field
from typing import Optional

from pyddbexport.client.remote_client import RemoteClient
from pyddbexport.common.export_options import ExportOptions
from pyddbexport.read.progress_reporter import NoOpReporter, ProgressReporter
from pyddbexport.read.rate_controller import RateController
from pyddbexport.split.split import Split


@dataclass
class ReadContext:
    """Everything the requests of one worker share."""
    options: ExportOptions
    client: RemoteClient
    split: Split
    rate_controller: RateController
    reporter: ProgressReporter = field(default_factory=NoOpReporter)
    attributes: Optional[list] = None

    def __post_init__(self):
        if self.attributes is None:
            self.attributes = self.options.attributes()
