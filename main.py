"""
Lexicon Builder - CLI Entry Point

Build deduplicated vocabulary tu mot directory tree va (optional) luu
snapshot ra file.

    lexicon-builder data/ -o dict.txt --strategy bloom --workers 64

Exit codes:
- 0: Build xong (va save thanh cong neu co --output)
- 1: Root khong phai directory, settings sai, hoac save that bai
- 130: Build bi cancel boi Ctrl-C
"""

import argparse
import signal
import sys
import threading
from pathlib import Path
from typing import List, Optional

from config.build_settings import MEMBERSHIP_STRATEGIES, BuildSettings
from config.paths import DEFAULT_OUTPUT_FILE
from core.logging_config import (
    flush_logs,
    log_error,
    log_info,
    log_warning,
    set_debug_mode,
)
from core.tokenization.cancellation import CancellationToken
from core.vocabulary.dictionary import Dictionary
from core.vocabulary.report import BuildProgress
from services.dictionary_store import save_dictionary
from services.settings_manager import load_build_settings

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CANCELLED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lexicon-builder",
        description="Build a deduplicated word dictionary from a directory of text files",
    )
    parser.add_argument("directory", help="Root directory to ingest")
    parser.add_argument(
        "-o",
        "--output",
        nargs="?",
        const=str(DEFAULT_OUTPUT_FILE),
        default=None,
        help=f"Save the dictionary blob (bare -o writes {DEFAULT_OUTPUT_FILE})",
    )
    parser.add_argument("--workers", type=int, default=None, help="Word worker threads")
    parser.add_argument("--readers", type=int, default=None, help="File reader threads")
    parser.add_argument(
        "--strategy",
        choices=list(MEMBERSHIP_STRATEGIES),
        default=None,
        help="Dedup strategy: exact set or Bloom filter",
    )
    parser.add_argument(
        "--expected-items", type=int, default=None, help="Bloom filter capacity"
    )
    parser.add_argument(
        "--fp-rate", type=float, default=None, help="Bloom filter false-positive rate"
    )
    parser.add_argument(
        "--exclude",
        action="append",
        default=None,
        metavar="PATTERN",
        help="Gitignore-style pattern to skip (repeatable)",
    )
    parser.add_argument(
        "--gitignore", action="store_true", help="Honor the root's .gitignore"
    )
    parser.add_argument(
        "--skip-binary", action="store_true", help="Skip binary files"
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser


def resolve_settings(args: argparse.Namespace) -> BuildSettings:
    """Settings tu settings.json, override boi CLI flags."""
    settings = load_build_settings()

    if args.workers is not None:
        settings.worker_count = args.workers
    if args.readers is not None:
        settings.reader_count = args.readers
    if args.strategy is not None:
        settings.membership_strategy = args.strategy
    if args.expected_items is not None:
        settings.expected_items = args.expected_items
    if args.fp_rate is not None:
        settings.false_positive_rate = args.fp_rate
    if args.exclude:
        settings.excluded_patterns = list(settings.excluded_patterns) + args.exclude
    if args.gitignore:
        settings.use_gitignore = True
    if args.skip_binary:
        settings.skip_binary_files = True

    return settings


def _log_progress(progress: BuildProgress) -> None:
    log_info(
        f"[CLI] {progress.files_finished}/{progress.files_discovered} files, "
        f"{progress.lines_read} lines, {progress.tokens_counted} words"
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.debug:
        set_debug_mode(True)

    root = Path(args.directory)
    if not root.is_dir():
        log_error(f"[CLI] Not a directory: {root}")
        flush_logs()
        return EXIT_FAILURE

    try:
        settings = resolve_settings(args)
        dictionary = Dictionary(settings)
    except ValueError as e:
        log_error("[CLI] Invalid settings", e)
        flush_logs()
        return EXIT_FAILURE

    token = CancellationToken()
    # signal.signal() chi goi duoc tu main thread
    previous_handler = None
    if threading.current_thread() is threading.main_thread():
        previous_handler = signal.signal(
            signal.SIGINT, lambda _sig, _frame: token.cancel()
        )
    try:
        report = dictionary.build_from_dir(
            root, cancel_token=token, progress_callback=_log_progress
        )
    finally:
        if previous_handler is not None:
            signal.signal(signal.SIGINT, previous_handler)

    log_info(
        f"[CLI] unique_words={dictionary.unique_word_count} "
        f"total_words={dictionary.total_word_count}"
    )
    for failed in report.failed_files:
        log_warning(f"[CLI] Unreadable file {failed.path}: {failed.error}")

    if report.cancelled:
        log_warning("[CLI] Build cancelled, dictionary is partial and was not saved")
        flush_logs()
        return EXIT_CANCELLED

    if args.output:
        result = save_dictionary(dictionary.snapshot(), args.output)
        if not result.success:
            log_error(f"[CLI] Could not save dictionary: {result.error}")
            flush_logs()
            return EXIT_FAILURE

    flush_logs()
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
