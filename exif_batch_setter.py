#!/usr/bin/env python3
"""
EXIF Batch Timestamp Setter

Sets DateTimeOriginal, DateTimeDigitized and DateTime to one fixed value on
every JPEG in a folder. Each file is backed up to '<name>.bak' before it is
touched, unless backups are disabled, and an existing backup is never
overwritten. Failures are isolated per file; the exit status tells whether
every JPEG was updated.
"""

import argparse
import sys
from pathlib import Path
from typing import List, NamedTuple, Optional, Sequence

from exif_batch_utils import (
    BackupError,
    ValidationError,
    ensure_backup,
    is_jpeg_path,
    iter_candidate_files,
    validate_root,
    validate_timestamp,
)
from exif_timestamp_writer import MutateError, apply_timestamp

EXIT_SUCCESS = 0
EXIT_FILE_FAILURES = 1
EXIT_USAGE_ERROR = 2

STATUS_SUCCEEDED = "succeeded"
STATUS_DRY_RUN = "dry_run"
STATUS_BACKUP_FAILED = "backup_failed"
STATUS_MUTATE_FAILED = "mutate_failed"

SUCCESS_STATUSES = {STATUS_SUCCEEDED, STATUS_DRY_RUN}


class MutationRequest(NamedTuple):
    """Everything one run needs, fixed before the first file is visited."""

    root: Path
    timestamp: str
    recursive: bool = False
    dry_run: bool = False
    make_backup: bool = True


class ExifBatchSetter:
    """Applies one EXIF timestamp to every JPEG found under a folder."""

    def __init__(self, request: MutationRequest):
        """
        Validate the request before any file is touched.

        Args:
            request: Root folder, timestamp and run flags

        Raises:
            ValidationError: If the timestamp is malformed or the root is
                not an existing directory
        """
        validate_timestamp(request.timestamp)
        self.root = validate_root(request.root)
        self.request = request
        self.errors: List[str] = []

    def run(self) -> dict:
        """
        Process every candidate file exactly once.

        Returns:
            Dictionary with total, succeeded and skipped_by_type counts
        """
        statistics = self._initialize_statistics()

        for file_path in iter_candidate_files(self.root, self.request.recursive):
            if not is_jpeg_path(file_path):
                statistics["skipped_by_type"] += 1
                continue

            file_result = self.process_single_file(file_path)
            self._report_file_result(file_result)
            self._update_statistics_from_file_result(statistics, file_result)

        return statistics

    def process_single_file(self, file_path: Path) -> dict:
        """
        Back up then stamp a single JPEG.

        Dry runs touch nothing on disk and always count as success; the
        container is not inspected.

        Args:
            file_path: JPEG file to process

        Returns:
            Dictionary with file_path, status and error (None on success)
        """
        result = {"file_path": file_path, "status": STATUS_SUCCEEDED, "error": None}

        if self.request.dry_run:
            result["status"] = STATUS_DRY_RUN
            return result

        if self.request.make_backup:
            try:
                ensure_backup(file_path)
            except BackupError as e:
                result["status"] = STATUS_BACKUP_FAILED
                result["error"] = str(e)
                return result

        try:
            apply_timestamp(file_path, self.request.timestamp)
        except MutateError as e:
            result["status"] = STATUS_MUTATE_FAILED
            result["error"] = str(e)

        return result

    def exit_status(self, statistics: dict) -> int:
        """Return 0 when every candidate succeeded, 1 otherwise."""
        if statistics["succeeded"] == statistics["total"]:
            return EXIT_SUCCESS
        return EXIT_FILE_FAILURES

    def _initialize_statistics(self) -> dict:
        """Initialize the run statistics dictionary."""
        return {"total": 0, "succeeded": 0, "skipped_by_type": 0}

    def _report_file_result(self, result: dict):
        """Print the one-line outcome for a processed file."""
        file_path = result["file_path"]
        status = result["status"]

        if status == STATUS_SUCCEEDED:
            print(f"OK : {file_path}")
        elif status == STATUS_DRY_RUN:
            print(f"DRY: {file_path}")
        else:
            message = f"{file_path} : {result['error']}"
            self.errors.append(message)
            print(f"ERR: {message}", file=sys.stderr)

    def _update_statistics_from_file_result(self, statistics: dict, result: dict):
        """Fold one file's outcome into the run statistics."""
        statistics["total"] += 1
        if result["status"] in SUCCESS_STATUSES:
            statistics["succeeded"] += 1


def build_argument_parser() -> argparse.ArgumentParser:
    """Build the command-line parser."""
    parser = argparse.ArgumentParser(
        description="Set EXIF date taken on every JPEG in a folder",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s /path/to/photos "2026:02:25 18:30:00"
  %(prog)s /path/to/photos "2026:02:25 18:30:00" --recursive
  %(prog)s /path/to/photos "2026:02:25 18:30:00" --dry-run

Fields written: DateTimeOriginal, DateTimeDigitized, DateTime.
A run that stopped half-way can be repeated with --no-backup.
        """,
    )

    parser.add_argument("root_directory", help="Folder containing JPEG files")
    parser.add_argument("timestamp", help='New timestamp, "YYYY:MM:DD HH:MM:SS"')
    parser.add_argument(
        "--recursive", action="store_true", help="Process subfolders"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Do not modify files, just print what would be changed",
    )
    parser.add_argument(
        "--no-backup",
        action="store_true",
        help="Do not create .bak backup files",
    )
    return parser


def parse_arguments(
    argv: Optional[Sequence[str]] = None,
    parser: Optional[argparse.ArgumentParser] = None,
) -> MutationRequest:
    """Parse command-line arguments into a MutationRequest."""
    if parser is None:
        parser = build_argument_parser()
    parsed_arguments = parser.parse_args(argv)

    return MutationRequest(
        root=Path(parsed_arguments.root_directory),
        timestamp=parsed_arguments.timestamp,
        recursive=parsed_arguments.recursive,
        dry_run=parsed_arguments.dry_run,
        make_backup=not parsed_arguments.no_backup,
    )


def print_summary(statistics: dict, errors: List[str]):
    """Print the final counts and any errors collected, in red on a terminal."""
    print(
        f"Done. Updated {statistics['succeeded']} / {statistics['total']} "
        f"JPEG files. Skipped(non-jpeg): {statistics['skipped_by_type']}"
    )

    if errors:
        red, reset = ("\033[91m", "\033[0m") if sys.stdout.isatty() else ("", "")
        print()
        print(f"{red}ERRORS ENCOUNTERED ({len(errors)}):{reset}")
        for error in errors:
            print(f"{red}  {error}{reset}")


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point for the script."""
    parser = build_argument_parser()
    request = parse_arguments(argv, parser)

    try:
        setter = ExifBatchSetter(request)
    except ValidationError as error:
        print(f"Error: {error}", file=sys.stderr)
        parser.print_usage(sys.stderr)
        return EXIT_USAGE_ERROR

    print(f"Folder: {setter.root}")
    print(f"Timestamp: {request.timestamp}")
    print(f"Recursive: {'Yes' if request.recursive else 'No'}")
    print(f"Dry run: {'Yes' if request.dry_run else 'No'}")
    print(f"Backup: {'Yes' if request.make_backup and not request.dry_run else 'No'}")
    print()

    statistics = setter.run()
    print_summary(statistics, setter.errors)

    return setter.exit_status(statistics)


if __name__ == "__main__":
    sys.exit(main())
