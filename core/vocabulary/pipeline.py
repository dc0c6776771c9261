"""
Build Pipeline - Orchestration cua directory walk, file readers va word workers.

3 concurrency tiers:
1. Traversal thread (1/build): walk directory, submit 1 producer task / file
2. Reader pool (reader_count threads): moi producer stream lines cua 1 file
   vao line queue. So tasks unbounded, so threads bounded.
3. Worker pool (worker_count threads): drain line queue, tokenize,
   goi sink.count_word() + sink.append_if_not_exists()

Line queue bounded (line_buffer_size) -> backpressure: khi workers ban,
producers block o put(), tu dong throttle file I/O.

Two-phase barrier:
- Phase 1: join traversal thread (da doi reader pool shutdown) -> het lines
- Close queue (1 sentinel / worker), Phase 2: join tat ca workers

AN TOAN CANCELLATION:
- Producers put() voi timeout va check token -> khong deadlock khi cancel
- Workers van get() cho den sentinel (bo qua lines) -> barrier luon hoan tat
"""

import queue
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from contextlib import closing
from pathlib import Path
from typing import Callable, List, Optional, Protocol

from config.build_settings import BuildSettings
from core.ignore_engine import build_pathspec
from core.logging_config import log_debug, log_error, log_info
from core.tokenization.cancellation import CancellationToken
from core.tokenization.tokenizer import tokenize
from core.utils.atomic_counter import AtomicCounter
from core.utils.file_scanner import enumerate_files
from core.utils.file_utils import enumerate_file
from core.vocabulary.report import (
    BuildProgress,
    BuildReport,
    FileOutcome,
    OutcomeStatus,
)

# Sentinel dong line queue, moi worker nhan dung 1 cai
_CLOSE = object()

# Producer check cancellation moi 100ms khi queue day
PUT_POLL_SECONDS = 0.1

ProgressCallback = Callable[[BuildProgress], None]


class WordSink(Protocol):
    """Phia nhan tokens (Dictionary)."""

    def count_word(self) -> None:
        ...

    def append_if_not_exists(self, word: str) -> bool:
        ...

    @property
    def total_word_count(self) -> int:
        ...


class _ProgressThrottle:
    """Emit progress toi da 1 lan / interval, thread-safe."""

    def __init__(
        self,
        callback: Optional[ProgressCallback],
        interval_ms: int,
        sink: WordSink,
    ):
        self._callback = callback
        self._interval_ms = interval_ms
        self._sink = sink
        self._last_emit_ms: float = 0
        self._lock = threading.Lock()

        self.files_discovered = AtomicCounter()
        self.files_finished = AtomicCounter()
        self.lines_read = AtomicCounter()
        self.current_path = ""

    def emit(self, force: bool = False) -> None:
        if self._callback is None:
            return

        now_ms = time.monotonic() * 1000
        with self._lock:
            if not force and now_ms - self._last_emit_ms < self._interval_ms:
                return
            self._last_emit_ms = now_ms
            progress = BuildProgress(
                files_discovered=self.files_discovered.value,
                files_finished=self.files_finished.value,
                lines_read=self.lines_read.value,
                tokens_counted=self._sink.total_word_count,
                current_path=self.current_path,
            )

        try:
            self._callback(progress)
        except Exception as e:
            # Callback loi khong duoc lam hong build
            log_debug(f"[Pipeline] Progress callback failed: {e}")


class BuildPipeline:
    """
    Chay mot lan ingest tu directory vao WordSink.

    Usage:
        pipeline = BuildPipeline(dictionary, settings)
        report = pipeline.run(Path("data"))
    """

    def __init__(self, sink: WordSink, settings: BuildSettings):
        self._sink = sink
        self._settings = settings

    def run(
        self,
        root_path: Path,
        cancel_token: Optional[CancellationToken] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> BuildReport:
        """
        Walk root_path va stream moi dong qua worker pool. Block den khi xong.

        Args:
            root_path: Thu muc goc
            cancel_token: Token de dung build som (optional)
            progress_callback: Nhan BuildProgress (throttled)

        Returns:
            BuildReport voi outcome cua tung file
        """
        root_path = Path(root_path)
        token = cancel_token or CancellationToken()
        report = BuildReport(root=str(root_path))
        progress = _ProgressThrottle(
            progress_callback, self._settings.progress_interval_ms, self._sink
        )
        line_queue: "queue.Queue[object]" = queue.Queue(
            maxsize=self._settings.line_buffer_size
        )

        started = time.monotonic()
        log_info(
            f"[Pipeline] Building from {root_path} "
            f"(workers={self._settings.worker_count}, "
            f"readers={self._settings.reader_count}, "
            f"strategy={self._settings.membership_strategy})"
        )

        workers: List[threading.Thread] = []
        for i in range(self._settings.worker_count):
            worker = threading.Thread(
                target=self._worker_loop,
                args=(line_queue, token, report),
                name=f"lexicon-worker-{i}",
                daemon=True,
            )
            worker.start()
            workers.append(worker)

        walker = threading.Thread(
            target=self._walk_and_produce,
            args=(root_path, line_queue, token, report, progress),
            name="lexicon-walker",
            daemon=True,
        )
        walker.start()

        # Phase 1: walker da doi tat ca producers (reader pool shutdown)
        walker.join()

        # Dong channel: moi worker nhan 1 sentinel roi exit
        for _ in workers:
            line_queue.put(_CLOSE)

        # Phase 2: doi workers drain het queue
        for worker in workers:
            worker.join()

        report.cancelled = token.is_cancelled()
        report.duration = time.monotonic() - started
        progress.emit(force=True)

        log_info(f"[Pipeline] Build finished: {report.summary()}")
        return report

    def _walk_and_produce(
        self,
        root_path: Path,
        line_queue: "queue.Queue[object]",
        token: CancellationToken,
        report: BuildReport,
        progress: _ProgressThrottle,
    ) -> None:
        """Traversal thread: discover files, submit 1 producer task moi file."""
        try:
            spec = build_pathspec(
                root_path,
                excluded_patterns=self._settings.excluded_patterns,
                use_gitignore=self._settings.use_gitignore,
            )

            with ThreadPoolExecutor(
                max_workers=self._settings.reader_count,
                thread_name_prefix="lexicon-reader",
            ) as readers:
                for file_path in enumerate_files(
                    root_path,
                    ignore_spec=spec,
                    on_error=self._on_walk_error(report),
                    cancel_token=token,
                    skip_binary=self._settings.skip_binary_files,
                ):
                    progress.files_discovered.increment()
                    progress.current_path = str(file_path)
                    progress.emit()

                    readers.submit(
                        self._produce_file,
                        file_path,
                        line_queue,
                        token,
                        report,
                        progress,
                    )
                # Thoat with -> shutdown(wait=True): doi tat ca producers
        except Exception as e:
            # Bug trong walker khong duoc lam treo barrier
            log_error(f"[Pipeline] Directory walk aborted for {root_path}", e)
            report.add_walk_error(root_path, e)

    @staticmethod
    def _on_walk_error(report: BuildReport):
        def on_error(path: Path, exc: OSError) -> None:
            log_debug(f"[Pipeline] Skipping entry {path}: {exc}")
            report.add_walk_error(path, exc)

        return on_error

    def _produce_file(
        self,
        file_path: Path,
        line_queue: "queue.Queue[object]",
        token: CancellationToken,
        report: BuildReport,
        progress: _ProgressThrottle,
    ) -> None:
        """Producer task: stream tung dong cua 1 file vao line queue."""
        if token.is_cancelled():
            report.add_file(FileOutcome(str(file_path), OutcomeStatus.SKIPPED))
            progress.files_finished.increment()
            return

        errors: List[OSError] = []
        lines = 0
        interrupted = False

        try:
            with closing(
                enumerate_file(file_path, on_error=lambda _p, e: errors.append(e))
            ) as source:
                for line in source:
                    if not self._put(line_queue, line, token):
                        interrupted = True
                        break
                    lines += 1
        except Exception as e:
            log_error(f"[Pipeline] Producer failed for {file_path}", e)
            errors.append(OSError(str(e)))

        progress.lines_read.increment(lines)

        if errors:
            log_debug(f"[Pipeline] Could not read {file_path}: {errors[0]}")
            outcome = FileOutcome(
                str(file_path), OutcomeStatus.FAILED, lines, str(errors[0])
            )
        elif interrupted:
            outcome = FileOutcome(str(file_path), OutcomeStatus.SKIPPED, lines)
        elif lines:
            outcome = FileOutcome(str(file_path), OutcomeStatus.READ, lines)
        else:
            outcome = FileOutcome(str(file_path), OutcomeStatus.EMPTY)

        report.add_file(outcome)
        progress.files_finished.increment()
        progress.emit()

    @staticmethod
    def _put(
        line_queue: "queue.Queue[object]",
        line: str,
        token: CancellationToken,
    ) -> bool:
        """
        Put voi backpressure, tra ve False neu build bi cancel truoc khi put duoc.
        """
        while not token.is_cancelled():
            try:
                line_queue.put(line, timeout=PUT_POLL_SECONDS)
                return True
            except queue.Full:
                continue
        return False

    def _worker_loop(
        self,
        line_queue: "queue.Queue[object]",
        token: CancellationToken,
        report: BuildReport,
    ) -> None:
        """Worker: drain queue cho den khi nhan sentinel."""
        while True:
            line = line_queue.get()
            if line is _CLOSE:
                return

            # Sau cancel van phai drain de producers/sentinels khong bi block
            if token.is_cancelled():
                continue

            try:
                for word in tokenize(line):  # type: ignore[arg-type]
                    self._sink.count_word()
                    self._sink.append_if_not_exists(word)
            except Exception as e:
                log_error("[Pipeline] Worker failed to process line", e)
                report.add_worker_error()
