"""
ISC License

Copyright (c) 2023 Eric Chickering <eric.chickering@gmail.com>

Permission to use, copy, modify, and/or distribute this software for any
purpose with or without fee is hereby granted, provided that the above
copyright notice and this permission notice appear in all copies.

THE SOFTWARE IS PROVIDED "AS IS" AND THE AUTHOR DISCLAIMS ALL WARRANTIES
WITH REGARD TO THIS SOFTWARE INCLUDING ALL IMPLIED WARRANTIES OF
MERCHANTABILITY AND FITNESS. IN NO EVENT SHALL THE AUTHOR BE LIABLE FOR
ANY SPECIAL, DIRECT, INDIRECT, OR CONSEQUENTIAL DAMAGES OR ANY DAMAGES
WHATSOEVER RESULTING FROM LOSS OF USE, DATA OR PROFITS, WHETHER IN AN ACTION
OF CONTRACT, NEGLIGENCE OR OTHER TORTIOUS ACTION, ARISING OUT OF OR IN
CONNECTION WITH THE USE OR PERFORMANCE OF THIS SOFTWARE.

"""
import argparse
import datetime
import logging
import os
import re
import sys
import time

from catalog import CatalogBuilder
from config import ConfigurationManager
from emit import RuleEmitter
from log_module import RunLogger, setup_logging
from parse import PanoramaXmlLoader
from parse.exceptions import ConfigError, InvalidParameterError, PanoramaError, XmlParsingError
from resolve import ReferenceResolver

EXIT_SUCCESS = 0
EXIT_UNEXPECTED = 1
EXIT_INVALID_PARAMETERS = 2
EXIT_XML_ERROR = 3
EXIT_PROCESSING_ERROR = 4

logger = logging.getLogger(__name__)


def build_arg_parser():
    parser = argparse.ArgumentParser(description="Flatten Panorama security rules into NDJSON documents for bulk indexing")
    parser.add_argument('-f', '--file', type=str, help="Path to the Panorama XML export file")
    parser.add_argument('-t', '--tenant', type=str, help="Logical tenant name (default from config: 'default')")
    parser.add_argument('-d', '--date', type=str, help="Snapshot date in YYYY-MM-DD format (default: today)")
    parser.add_argument('-o', '--out', type=str, help="NDJSON output file path (default: storage/app/panorama_rules.ndjson)")
    parser.add_argument('-c', '--config', type=str, help="YAML settings file (default: ~/.panrules/config.yml when present)")
    parser.add_argument('--log-file', type=str, help="Debug log file (default: debug-log.txt)")
    parser.add_argument('--write-config', action='store_true', help="Write a default settings file to the --config path and exit")
    parser.add_argument('-v', '--verbose', action='store_true', help="Show debug output on the console")
    return parser


def is_valid_date(value):
    if not isinstance(value, str) or not re.fullmatch(r'\d{4}-\d{2}-\d{2}', value):
        return False
    try:
        datetime.datetime.strptime(value, '%Y-%m-%d')
    except ValueError:
        return False
    return True


def get_validated_parameters(args, config):
    file_path = args.file
    if not file_path:
        raise InvalidParameterError("XML file path is required (--file)")
    if not os.path.exists(file_path):
        raise InvalidParameterError(f"File does not exist: {file_path}")
    if not os.path.isfile(file_path):
        raise InvalidParameterError(f"Path is not a file: {file_path}")
    if not os.access(file_path, os.R_OK):
        raise InvalidParameterError(f"File is not readable: {file_path}")

    tenant = args.tenant or config.tenant

    snapshot_date = args.date or datetime.date.today().strftime('%Y-%m-%d')
    if not is_valid_date(snapshot_date):
        raise InvalidParameterError(f"Invalid date format. Use YYYY-MM-DD format: {snapshot_date}")

    output_path = args.out or config.output_path
    output_dir = os.path.dirname(os.path.abspath(output_path))
    try:
        os.makedirs(output_dir, exist_ok=True)
    except OSError as e:
        raise InvalidParameterError(f"Cannot create output directory: {output_dir} ({e})") from e
    if not os.access(output_dir, os.W_OK):
        raise InvalidParameterError(f"Output directory is not writable: {output_dir}")

    return {
        'file': file_path,
        'tenant': tenant,
        'date': snapshot_date,
        'output': output_path,
    }


def run(parameters, config):
    start_time = time.time()
    logger.info("Starting Panorama rules ingestion")
    logger.info(f"File: {parameters['file']}, Tenant: {parameters['tenant']}, Date: {parameters['date']}, Output: {parameters['output']}")

    logger.info("Loading XML configuration...")
    root = PanoramaXmlLoader().load(parameters['file'])

    logger.info("Building object catalogs...")
    catalog_builder = CatalogBuilder(zone_fallback_threshold=config.zone_fallback_threshold)
    catalog = catalog_builder.build(root)
    logger.info(
        f"Catalogs built: {len(catalog.device_groups)} device groups, "
        f"{catalog.object_count()} objects, {len(catalog.zones)} zones"
    )

    resolver = ReferenceResolver(catalog)
    emitter = RuleEmitter(parameters['tenant'], parameters['date'], resolver)

    logger.info("Processing security rules...")
    with open(parameters['output'], 'w', encoding='utf-8', newline='\n') as stream:
        stats = emitter.emit_security_rules_as_ndjson(root, stream)

    logger.info(f"Rules processed: {stats.rules_processed}")
    if stats.rules_skipped:
        logger.warning(f"Rules skipped: {stats.rules.summary()}")
    if catalog_builder.issue_count():
        issues = ', '.join(
            f"{kind}: {tally.skipped_count}" for kind, tally in catalog_builder.stats.items() if tally.skipped_count
        )
        logger.warning(f"Catalog entries with recoverable issues: {issues}")
    unresolved = {kind.value: count for kind, count in stats.resolution.items() if kind.value not in ('resolved', 'passthrough')}
    if unresolved:
        logger.info(f"Reference outcomes needing review: {unresolved}")

    logger.info(f"Processing time: {time.time() - start_time:.2f} seconds")
    logger.info(f"Output written to: {parameters['output']}")
    return stats


def main(argv=None):
    args = build_arg_parser().parse_args(argv)

    if args.write_config:
        path = ConfigurationManager(args.config, load=False).create_default_config_file()
        print(f"Default settings written to {path}")
        return EXIT_SUCCESS

    try:
        config = ConfigurationManager(args.config).app_config
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_INVALID_PARAMETERS

    log_file = args.log_file or config.log_file
    run_logger = RunLogger(log_file)
    try:
        run_logger.cleanup_old_logs()
        setup_logging(log_file, logging.DEBUG if args.verbose else str(config.console_log_level).upper())
        start_position = run_logger.mark_start_of_run_in_log()
    except OSError as e:
        print(f"Cannot open log file {log_file}: {e}", file=sys.stderr)
        return EXIT_INVALID_PARAMETERS

    try:
        parameters = get_validated_parameters(args, config)
        run(parameters, config)
    except InvalidParameterError as e:
        logger.error(f"Invalid parameters: {e}")
        return EXIT_INVALID_PARAMETERS
    except XmlParsingError as e:
        logger.error(f"XML parsing failed: {e}")
        return EXIT_XML_ERROR
    except PanoramaError as e:
        logger.error(f"Panorama processing error: {e} {e.context}")
        return EXIT_PROCESSING_ERROR
    except OSError as e:
        logger.error(f"Cannot write output: {e}")
        return EXIT_INVALID_PARAMETERS
    except Exception as e:
        logger.error(f"Unexpected error: {e}", exc_info=True)
        return EXIT_UNEXPECTED

    problems = run_logger.warnings_and_errors_since(start_position)
    if problems:
        logger.info(f"{len(problems)} warnings/errors logged during this run, see {log_file}")
    return EXIT_SUCCESS


if __name__ == "__main__":
    sys.exit(main())
