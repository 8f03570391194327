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
Command line export of a table into JSON lines files, one part file per split.

    python -m pyddbexport.tools.export --table_name events --index_name by-bucket \
        --row_key bucket --sort_key created --min_sort_key 2022-03-02T12:00:00 \
        --max_sort_key 2022-03-03T12:00:00 --sample_percent 0.01 --output_path /tmp/events
"""

import argparse
import logging
import os
import sys
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from functools import partial
from typing import Callable, List, Optional

from pyddbexport.client.remote_client import RemoteClient
from pyddbexport.common.exceptions import ConfigurationError, ExportException
from pyddbexport.common.export_options import ExportOptions, SplitPolicy
from pyddbexport.common.json_util import to_json_line
from pyddbexport.common.time_utils import to_epoch_seconds
from pyddbexport.read.export_read import ExportRead, default_client_factory
from pyddbexport.read.progress_reporter import CancellableReporter
from pyddbexport.read.read_builder import ExportReadBuilder
from pyddbexport.read.read_manager import ReadStats
from pyddbexport.split.split import Split

logger = logging.getLogger(__name__)

SUCCESS_MARKER = "_SUCCESS"


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Export a table, or a sampled key range of one of its indexes.")
    p.add_argument("--table_name", required=True, help="Table to export")
    p.add_argument("--index_name", default=None,
                   help="Index with a bucketed numeric row key. Enables the sampled key-range export")
    p.add_argument("--row_key", default=None, help="Row key attribute of the index")
    p.add_argument("--sort_key", default=None, help="Numeric sort key attribute of the index")
    p.add_argument("--min_sort_key", default=None, help="Lower bound, ISO-8601 timestamp (UTC)")
    p.add_argument("--max_sort_key", default=None, help="Upper bound, ISO-8601 timestamp (UTC)")
    p.add_argument("--sample_percent", type=float, default=None,
                   help="Fraction of the row key space to export (default 0.001)")
    p.add_argument("--output_path", required=True, help="Directory the part files are written to")
    p.add_argument("--attributes", default=None, help="Comma-separated attributes to export")
    p.add_argument("--read_ratio", type=float, default=None,
                   help="Fraction of the table's read capacity to use (default 0.5)")
    p.add_argument("--workers", type=int, default=1, help="Number of parallel workers")
    p.add_argument("--dynamo_endpoint", default=None, help="Endpoint override, e.g. a local instance")
    p.add_argument("--region", default=None, help="Region of the table")
    p.add_argument("--ray", action="store_true", help="Read the splits as a Ray dataset")
    return p.parse_args(argv)


def _epoch_seconds(option, timestamp: str) -> int:
    try:
        return to_epoch_seconds(timestamp)
    except ValueError as e:
        raise ConfigurationError(option.key(), f"invalid timestamp for {option.key()}: {timestamp}") from e


def build_options(args: argparse.Namespace) -> ExportOptions:
    options = {
        ExportOptions.TABLE_NAME.key(): args.table_name,
        ExportOptions.SCAN_PARALLELISM.key(): args.workers,
    }
    if args.index_name:
        options[ExportOptions.SPLIT_POLICY.key()] = SplitPolicy.SAMPLED_KEY_RANGE.value
        options[ExportOptions.INDEX_NAME.key()] = args.index_name
    if args.row_key:
        options[ExportOptions.ROW_KEY_NAME.key()] = args.row_key
    if args.sort_key:
        options[ExportOptions.SORT_KEY_NAME.key()] = args.sort_key
    if args.min_sort_key:
        min_option = ExportOptions.SORT_KEY_MIN_VALUE
        options[min_option.key()] = _epoch_seconds(min_option, args.min_sort_key)
    if args.max_sort_key:
        max_option = ExportOptions.SORT_KEY_MAX_VALUE
        options[max_option.key()] = _epoch_seconds(max_option, args.max_sort_key)
    if args.sample_percent is not None:
        options[ExportOptions.ROW_SAMPLE_PERCENT.key()] = args.sample_percent
    if args.attributes:
        options[ExportOptions.ATTRIBUTES.key()] = args.attributes
    if args.read_ratio is not None:
        options[ExportOptions.THROUGHPUT_READ_PERCENT.key()] = args.read_ratio
    if args.dynamo_endpoint:
        options[ExportOptions.ENDPOINT.key()] = args.dynamo_endpoint
    if args.region:
        options[ExportOptions.REGION.key()] = args.region
    return ExportOptions.from_dict(options)


def part_file_name(split: Split) -> str:
    return "part-%05d" % split.split_id


def export_split(export_read: ExportRead, split: Split, output_path: str, reporter: CancellableReporter) -> ReadStats:
    manager = export_read.new_manager(split, reporter=reporter)
    path = os.path.join(output_path, part_file_name(split))
    with open(path, "w", encoding="utf-8") as f:
        for row in manager.read():
            f.write(to_json_line(row))
            f.write("\n")
    if manager.cancelled:
        raise ExportException("Split %s was cancelled", split.split_id)
    logger.info("Wrote %s: %s", path, manager.stats)
    return manager.stats


def export_local(export_read: ExportRead, splits: List[Split], output_path: str, workers: int):
    cancel_event = threading.Event()
    with ThreadPoolExecutor(max_workers=max(1, min(workers, len(splits)))) as executor:
        futures = {
            executor.submit(export_split, export_read, split, output_path,
                            CancellableReporter(f"split-{split.split_id}", cancel_event=cancel_event)): split
            for split in splits
        }
        try:
            for future in as_completed(futures):
                future.result()
        except BaseException:
            cancel_event.set()
            raise


def export_ray(export_read: ExportRead, splits: List[Split], output_path: str, workers: int):
    dataset = export_read.to_ray(splits, parallelism=workers)
    for index, batch in enumerate(dataset.iter_batches(batch_format="pyarrow", batch_size=None)):
        path = os.path.join(output_path, "part-%05d" % index)
        with open(path, "w", encoding="utf-8") as f:
            for row in batch.to_pylist():
                f.write(to_json_line({k: v for k, v in row.items() if v is not None}))
                f.write("\n")


def run(args: argparse.Namespace, client_factory: Callable[[ExportOptions], RemoteClient] = default_client_factory):
    options = build_options(args)
    os.makedirs(args.output_path, exist_ok=True)

    with client_factory(options) as client:
        builder = ExportReadBuilder(client, options).with_parallelism(args.workers)
        plan = builder.new_scan().plan()
        export_read = builder.new_read(plan.table_description(), partial(client_factory, options))
        if args.ray:
            export_ray(export_read, plan.splits(), args.output_path, args.workers)
        else:
            export_local(export_read, plan.splits(), args.output_path, args.workers)

    with open(os.path.join(args.output_path, SUCCESS_MARKER), "w", encoding="utf-8"):
        pass
    logger.info("Export of %s finished, %d splits written to %s",
                args.table_name, len(plan.splits()), args.output_path)


def main(argv: Optional[List[str]] = None,
         client_factory: Callable[[ExportOptions], RemoteClient] = default_client_factory) -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    args = parse_args(argv)
    try:
        run(args, client_factory)
    except ExportException as e:
        logger.error("Export of %s failed: %s", args.table_name, e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
