#!/usr/bin/env python

"""
Journey Mapped - Photo Geolocation Journey Builder

Reads the location and capture time embedded in a batch of photos, orders the
geotagged ones into a journey, and writes trip statistics, a shareable summary
and an interactive map.

Usage:
    main.py [command] [options]

    Default command is 'map-journey' if none specified.

Commands:
    map-journey: Build the journey, statistics, summary and map from a photo batch (default)
    ingest: Send a JSON request body through the ingestion handler into the local store

Options:
    --input-dir: Directory of photos to process (default: photos)
    --zip-file: Zip archive of photos to process instead of a directory
    --year: Accepted capture year; repeat for several (default: current year)
    --output-dir: Path to output directory (default: results)
    --no-map: Skip rendering the HTML map
    --body-file: JSON request body for the ingest command
    --dry-run: Show what would be done without making changes
    --verbose: Enable verbose logging output
"""

import argparse
import json
import logging
import sys
from config import (
    INPUT_DIR,
    JOURNEY_FILE,
    JOURNEY_MAP_FILE,
    JOURNEY_STATS_FILE,
    JOURNEY_SUMMARY_FILE,
    OUTPUT_DIR,
)
from core.archive import PhotoArchiveExtractor
from core.journey import JourneyAssembler
from core.records import AcceptancePolicy, PhotoRecordBuilder
from core.session import JourneySession
from core.summary import JourneySummaryReport, build_map_markers, share_text
from datetime import UTC, datetime
from ingest.handlers import handler
from ingest.store import TinyDBPhotoStore
from pathlib import Path
from utils.exif import PhotoMetadataExtractor, encode_thumbnail, file_modified_time, find_photo_files
from utils.map_render import FoliumMapRenderer

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


class LoggingProgress:
    """Progress sink that logs every few photos"""

    def __init__(self, every: int = 10):
        self.every = every
        self.calls = 0

    def __call__(self, percent: float, message: str) -> None:
        self.calls += 1
        if self.calls % self.every == 0 or percent >= 100:
            logger.info(f"{message} ({percent:.1f}%)")


class JourneyPipeline:
    """Orchestrates photo discovery, journey assembly and output generation"""

    def __init__(
        self,
        input_dir: Path = INPUT_DIR,
        output_dir: Path = OUTPUT_DIR,
        accepted_years: list[int] | None = None,
        render_map: bool = True,
        dry_run: bool = False,
    ):
        self.input_dir = input_dir
        self.output_dir = output_dir
        self.render_map = render_map
        self.dry_run = dry_run
        self.policy = AcceptancePolicy(accepted_years)
        self.session = JourneySession(JourneyAssembler(PhotoRecordBuilder(policy=self.policy)))
        self.extractor = PhotoMetadataExtractor()

    def discover_photos(self) -> list[Path]:
        if not self.input_dir.exists():
            logger.error(f"Photos directory not found: {self.input_dir}")
            return []

        photos = find_photo_files(self.input_dir)
        logger.info(f"Found {len(photos)} photos in {self.input_dir}")
        return photos

    def run(self) -> bool:
        """Execute the complete journey pipeline"""
        logger.info(f"Building {self.policy.label()} journey from {self.input_dir}")

        photos = self.discover_photos()
        if not photos:
            return False

        if self.dry_run:
            logger.info(f"DRY RUN: Would process {len(photos)} photos and write results to {self.output_dir}")
            return True

        _, outcome, committed = self.session.process(photos, self.extractor, file_modified_time, progress=LoggingProgress())
        if not committed:
            return False

        skipped = outcome.skipped_by_reason()
        if skipped:
            logger.info(f"Skipped photos by reason: {skipped}")

        if outcome.is_empty:
            return False

        try:
            self.write_outputs()
        except OSError as e:
            logger.error(f"Error writing journey outputs: {e}")
            return False

        logger.info(share_text(self.session.statistics, self.policy.label()))
        return True

    def write_outputs(self) -> None:
        journey = self.session.journey
        stats = self.session.statistics
        outcome = self.session.last_outcome

        self.output_dir.mkdir(parents=True, exist_ok=True)

        journey_output = {
            'metadata': {
                'generation_date': datetime.now(UTC).isoformat(),
                'source_directory': str(self.input_dir),
                'accepted_years': sorted(self.policy.accepted_years),
                'total_photos_processed': outcome.total,
                'accepted_photos': outcome.accepted,
                'skipped_photos': outcome.skipped_count,
                'skipped_by_reason': outcome.skipped_by_reason(),
            },
            **journey.to_dict(),
        }

        with open(self.output_dir / JOURNEY_FILE, 'w') as f:
            json.dump(journey_output, f, indent=2)

        with open(self.output_dir / JOURNEY_STATS_FILE, 'w') as f:
            json.dump({**stats.to_dict(), 'share_text': share_text(stats, self.policy.label())}, f, indent=2)

        report = JourneySummaryReport(self.policy.label()).generate(journey, stats)
        with open(self.output_dir / JOURNEY_SUMMARY_FILE, 'w') as f:
            f.write(report)

        if self.render_map:
            renderer = FoliumMapRenderer()
            renderer.plot(build_map_markers(journey, thumbnail_for=encode_thumbnail))
            renderer.fit_view(journey.path)
            renderer.save(self.output_dir / JOURNEY_MAP_FILE)

        logger.info(f"Output written to {self.output_dir}")


def parse_arguments():
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(
        description="Journey Mapped - Photo Geolocation Journey Builder",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    parser.add_argument('command', nargs='?', default='map-journey', help='Command to execute (default: map-journey)')
    parser.add_argument('--dry-run', action='store_true', help='Show what would be done without making changes')
    parser.add_argument('--verbose', action='store_true', help='Enable verbose logging output')
    parser.add_argument('--input-dir', type=Path, default=INPUT_DIR, help='Directory of photos to process')
    parser.add_argument('--output-dir', type=Path, default=OUTPUT_DIR, help='Path to output directory')
    parser.add_argument('--zip-file', type=Path, help='Zip archive of photos to process instead of a directory')
    parser.add_argument('--year', type=int, action='append', dest='years', help='Accepted capture year (repeatable)')
    parser.add_argument('--no-map', action='store_true', help='Skip rendering the HTML map')

    # Ingest specific options
    parser.add_argument('--body-file', type=Path, help='JSON request body for the ingest command')

    return parser.parse_args()


def setup_logging(verbose: bool = False):
    """Configure logging based on verbosity level"""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format='%(asctime)s - %(levelname)s - %(message)s', force=True)


def run_map_journey(args) -> bool:
    archive = None
    input_dir = args.input_dir

    if args.zip_file:
        archive = PhotoArchiveExtractor()
        input_dir = archive.extract_archive(args.zip_file)
        if input_dir is None:
            return False

    try:
        pipeline = JourneyPipeline(
            input_dir=input_dir,
            output_dir=args.output_dir,
            accepted_years=args.years,
            render_map=not args.no_map,
            dry_run=args.dry_run,
        )
        return pipeline.run()
    finally:
        if archive is not None:
            archive.cleanup()


def run_ingest(args) -> bool:
    if not args.body_file or not args.body_file.exists():
        logger.error(f"Request body file not found: {args.body_file}")
        return False

    body = args.body_file.read_text()

    if args.dry_run:
        logger.info(f"DRY RUN: Would ingest {len(body)} bytes from {args.body_file}")
        return True

    store = TinyDBPhotoStore()
    try:
        result = handler({'httpMethod': 'POST', 'body': body}, store=store)
    finally:
        store.close()

    print(json.dumps(json.loads(result['body']), indent=2))
    return result['statusCode'] == 200


def main():
    args = parse_arguments()

    # Setup logging
    setup_logging(args.verbose)

    command = args.command

    if command == "map-journey":
        success = run_map_journey(args)
        sys.exit(0 if success else 1)

    elif command == "ingest":
        success = run_ingest(args)
        sys.exit(0 if success else 1)

    else:
        print(__doc__.strip())


if __name__ == "__main__":
    main()
