# trip_ingest/cli.py
"""
Command-line interface for the trip record bulk uploader

Usage Examples:
    # Upload using ./config.json
    trip-upload

    # Use another configuration file
    trip-upload --config configs/tracts_2021.json

    # Encode everything but send nothing, with debug logging
    trip-upload --dry-run --log-level DEBUG

    # Check the configuration file and exit
    trip-upload --validate-config
"""

import argparse
import json
import os
import sys

from dotenv import load_dotenv

from trip_ingest.config.settings import Settings, MAX_BATCH_SIZE
from trip_ingest.orchestrator.upload_pipeline import UploadPipeline, UploadResult
from trip_ingest.utils.logger import setup_pipeline_logging, get_logger
from trip_ingest.utils.exceptions import PipelineError, ConfigurationError


def parse_arguments(argv=None):
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(
        description='Trip record bulk uploader',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )

    parser.add_argument(
        '--config',
        default=os.getenv('TRIP_UPLOAD_CONFIG', './config.json'),
        help='Field mapping configuration file (default: ./config.json)'
    )

    parser.add_argument(
        '--batch-size',
        type=int,
        help=f'Records per bulk request, at most {MAX_BATCH_SIZE} (default: {MAX_BATCH_SIZE})'
    )

    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        help='Logging level (default: $LOG_LEVEL or INFO)'
    )

    parser.add_argument(
        '--log-dir',
        type=str,
        help='Directory for log files (default: console only)'
    )

    parser.add_argument(
        '--validate-config',
        action='store_true',
        help='Validate configuration and exit'
    )

    parser.add_argument(
        '--output-format',
        choices=['text', 'json'],
        default='text',
        help='Output format (default: text)'
    )

    parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Translate and encode batches without sending them'
    )

    return parser.parse_args(argv)


def load_settings(args) -> Settings:
    """Load settings, letting command line arguments win over the environment"""
    return Settings.load(
        args.config,
        batch_size=args.batch_size,
        log_level=args.log_level,
        log_dir=args.log_dir
    )


def print_results(result: UploadResult, output_format: str):
    """Print upload results"""
    if output_format == 'json':
        print(json.dumps(result.to_dict(), indent=2, default=str))
        return

    print("=== Upload Results ===")
    print(f"Status: {result.status}")
    print(f"Rows Read: {result.rows_read:,}")
    print(f"Empty Rows Skipped: {result.empty_rows:,}")
    print(f"Rows Failed: {result.rows_failed:,}")
    print(f"Records Translated: {result.records_translated:,}")
    print(f"Records Skipped While Encoding: {result.records_skipped_encoding:,}")
    print(f"Documents Sent: {result.documents_sent:,}")
    print(f"Batches Sent: {result.batches_sent}")
    print(f"Batches Failed: {result.batches_failed}")
    print(f"Processing Time: {result.processing_time_seconds:.2f} seconds")

    if result.errors:
        print(f"Errors: {len(result.errors)}")
        for error in result.errors[:3]:
            print(f"  - {error.get('message', 'Unknown error')}")
        if len(result.errors) > 3:
            print(f"  ... and {len(result.errors) - 3} more errors")


def main(argv=None):
    """Main entry point"""
    load_dotenv()
    args = parse_arguments(argv)

    try:
        settings = load_settings(args)
    except ConfigurationError as e:
        if args.validate_config:
            print(f"✗ Configuration is invalid: {e}")
        else:
            print(f"Configuration Error: {e}")
        return 1

    if args.validate_config:
        print(f"✓ Configuration is valid ({settings.field_mapping.required_columns} columns required per row)")
        return 0

    setup_pipeline_logging(
        log_level=settings.pipeline.log_level,
        log_dir=str(settings.pipeline.log_dir) if settings.pipeline.log_dir else None
    )
    logger = get_logger(__name__)
    logger.info("Starting.")
    logger.info(f"Arguments: {vars(args)}")

    try:
        pipeline = UploadPipeline(settings)
        result = pipeline.run(dry_run=args.dry_run)

    except PipelineError as e:
        logger.error(f"Pipeline failed: {e}")
        print(f"Pipeline Error: {e}")
        return 2

    except KeyboardInterrupt:
        print("\nUpload interrupted by user")
        return 130

    except Exception as e:
        logger.exception("Unexpected error")
        print(f"Unexpected error: {e}")
        return 3

    print_results(result, args.output_format)

    # Recoverable row/batch failures still count as a completed run
    if result.status == 'completed':
        logger.info("Upload completed successfully")
    else:
        logger.warning("Upload completed with errors")
    return 0


if __name__ == '__main__':
    sys.exit(main())
