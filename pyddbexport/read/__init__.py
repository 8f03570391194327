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

from pyddbexport.read.export_read import ExportRead
from pyddbexport.read.export_scan import ExportScan
from pyddbexport.read.plan import Plan
from pyddbexport.read.progress_reporter import (CancellableReporter,
                                                NoOpReporter, ProgressReporter)
from pyddbexport.read.rate_controller import RateController
from pyddbexport.read.read_builder import ExportReadBuilder
from pyddbexport.read.read_manager import ReadCheckpoint, ReadManager, ReadStats

__all__ = [
    'ExportRead', 'ExportScan', 'Plan', 'CancellableReporter', 'NoOpReporter', 'ProgressReporter',
    'RateController', 'ExportReadBuilder', 'ReadCheckpoint', 'ReadManager', 'ReadStats'
]
