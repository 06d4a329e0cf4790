#!/usr/bin/env python3
# Copyright 2025 TIER IV, inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""CLI entry point for validating data files against a model descriptor."""

import argparse
import dataclasses
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from ..config import ValidationConfig
from ..exceptions import ModelValidationError
from ..utils.source_location import SourceLocation, format_source
from . import CheckResult, check_files

logger = logging.getLogger(__name__)

DATA_EXTENSIONS = ('.yaml', '.yml', '.json')


def find_data_files(paths: List[str]) -> List[Path]:
    """Find all YAML/JSON data files in given paths."""
    data_files = []

    for path_str in paths:
        path = Path(path_str)

        if not path.exists():
            logger.warning(f"Path does not exist: {path}")
            continue

        if path.is_file():
            data_files.append(path)
        elif path.is_dir():
            for ext in DATA_EXTENSIONS:
                data_files.extend(path.rglob(f'*{ext}'))
        else:
            logger.warning(f"Path is neither file nor directory: {path}")

    return sorted(set(data_files))


def _print_human(results: List[CheckResult]) -> None:
    for result in results:
        if result.errors or result.warnings:
            print(f"\n{result.file_path}:")
            for error in result.errors:
                location = SourceLocation(
                    file_path=result.file_path,
                    line=error.get('line'),
                    column=error.get('column'),
                    yaml_path=error.get('yaml_path'),
                )
                key = f"{error['key']}: " if error.get('key') else ""
                print(f"  ERROR: {key}{error['message']}{format_source(location)}")
            for warning in result.warnings:
                print(f"  WARNING: {warning['message']}")


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for the checker CLI."""
    parser = argparse.ArgumentParser(
        description='Validate YAML/JSON data files against a model descriptor',
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        'paths',
        nargs='+',
        help='Data files or directories to validate',
    )
    parser.add_argument(
        '-d', '--descriptor',
        required=True,
        help='Model descriptor YAML file declaring the types',
    )
    parser.add_argument(
        '-t', '--type',
        dest='type_name',
        default=None,
        help="Declared type of each document (default: the descriptor's root)",
    )
    parser.add_argument(
        '--format',
        choices=['human', 'json', 'github-actions'],
        default='human',
        help='Output format (default: human)',
    )
    parser.add_argument(
        '--max-errors',
        type=int,
        default=None,
        help='Maximum number of errors recorded per document',
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable debug logging',
    )

    args = parser.parse_args(argv)

    try:
        config = ValidationConfig.from_env()
        if args.verbose:
            config.log_level = 'DEBUG'
        if args.max_errors is not None:
            config = dataclasses.replace(config, max_model_errors=args.max_errors)
    except ModelValidationError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)
    config.set_logging()

    data_files = find_data_files(args.paths)
    if not data_files:
        print("No data files found.", file=sys.stderr)
        sys.exit(1)

    try:
        results = check_files(args.descriptor, data_files, type_name=args.type_name, config=config)
    except ModelValidationError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)

    if args.format == 'json':
        output = {
            'files': len(results),
            'errors': sum(len(r.errors) for r in results),
            'warnings': sum(len(r.warnings) for r in results),
            'results': [r.to_dict() for r in results],
        }
        print(json.dumps(output, indent=2))
    elif args.format == 'github-actions':
        for result in results:
            for error in result.errors:
                print(f"::error file={result.file_path},line={error.get('line', 1)}::{error['message']}")
            for warning in result.warnings:
                print(f"::warning file={result.file_path},line={warning.get('line', 1)}::{warning['message']}")
    else:
        _print_human(results)

    total_errors = sum(len(r.errors) for r in results)
    if total_errors > 0:
        sys.exit(1)
    if args.format == 'human':
        print("Validation succeeded with no errors.")
    sys.exit(0)


if __name__ == '__main__':
    main()
