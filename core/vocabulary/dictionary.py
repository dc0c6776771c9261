"""
Dictionary - Aggregate root cua vocabulary build.

Owns:
- membership: MembershipSet (exact hoac Bloom) cho dedup
- unique_words: List tu phan biet theo thu tu xuat hien dau tien
- unique_word_count / total_word_count: monotonic counters

State machine: EMPTY -> BUILDING -> BUILT (terminal, read-only).
build_from_dir() chi duoc goi dung 1 lan tu EMPTY.

AN TOAN RACE CONDITION:
- append_if_not_exists(): may_contain() ngoai lock la fast path cho duplicates.
  Neu absent -> acquire lock, RE-CHECK, roi moi insert + append + increment.
  Re-check dam bao 2 workers cung thay word moi chi append 1 lan.
- total_word_count dung AtomicCounter rieng, khong bao gio lay dedup lock.
- Invariant: unique_word_count == len(unique_words) sau moi insert hoan tat.
"""

import threading
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple, Union

from config.build_settings import BuildSettings
from core.logging_config import log_info
from core.tokenization.cancellation import CancellationToken
from core.utils.atomic_counter import AtomicCounter
from core.vocabulary.membership import MembershipSet, create_membership_set
from core.vocabulary.pipeline import BuildPipeline, ProgressCallback
from core.vocabulary.report import BuildReport


class BuildState(str, Enum):
    """Lifecycle cua mot Dictionary instance."""

    EMPTY = "empty"
    BUILDING = "building"
    BUILT = "built"


class DictionaryStateError(RuntimeError):
    """build_from_dir() duoc goi khi Dictionary khong con EMPTY."""


@dataclass(frozen=True)
class DictionarySnapshot:
    """
    Export hook cho persistence collaborator.

    Chi on dinh (stable) khi Dictionary da BUILT.
    """

    unique_words: Tuple[str, ...]
    total_word_count: int
    unique_word_count: int


class Dictionary:
    """
    Deduplicated vocabulary voi total/unique word counters.

    Usage:
        d = Dictionary(BuildSettings(worker_count=64))
        report = d.build_from_dir(Path("data"))
        snapshot = d.snapshot()
    """

    def __init__(
        self,
        settings: Optional[BuildSettings] = None,
        membership: Optional[MembershipSet] = None,
    ):
        """
        Tao Dictionary rong.

        Args:
            settings: Build settings (default BuildSettings())
            membership: Inject MembershipSet; None -> tao theo settings.membership_strategy

        Raises:
            ValueError: Neu settings khong hop le
        """
        self._settings = settings or BuildSettings()
        self._settings.validate()

        if membership is None:
            membership = create_membership_set(
                self._settings.membership_strategy,
                self._settings.expected_items,
                self._settings.false_positive_rate,
            )
        self._membership = membership

        self._unique_words: List[str] = []
        self._unique_word_count = 0
        self._total_words = AtomicCounter()
        self._lock = threading.Lock()

        self._state = BuildState.EMPTY
        self._state_lock = threading.Lock()
        self._report: Optional[BuildReport] = None

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------

    @property
    def state(self) -> BuildState:
        with self._state_lock:
            return self._state

    @property
    def settings(self) -> BuildSettings:
        return self._settings

    @property
    def unique_words(self) -> List[str]:
        """Copy cua unique words (thu tu first-arrival, khong co y nghia)."""
        with self._lock:
            return list(self._unique_words)

    @property
    def unique_word_count(self) -> int:
        return self._unique_word_count

    @property
    def total_word_count(self) -> int:
        return self._total_words.value

    @property
    def report(self) -> Optional[BuildReport]:
        """BuildReport cua lan build, None neu chua build xong."""
        return self._report

    # ------------------------------------------------------------------
    # Mutation surface
    # ------------------------------------------------------------------

    def build_from_dir(
        self,
        root_path: Union[str, Path],
        cancel_token: Optional[CancellationToken] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> BuildReport:
        """
        Build dictionary tu tat ca files duoi root_path. Block den khi xong.

        File/entry khong doc duoc bi skip va ghi vao BuildReport, KHONG raise.

        Args:
            root_path: Thu muc goc
            cancel_token: Cancel build tu thread khac
            progress_callback: Nhan BuildProgress dinh ky

        Returns:
            BuildReport cua lan build

        Raises:
            DictionaryStateError: Neu Dictionary da build (hoac dang build)
        """
        with self._state_lock:
            if self._state is not BuildState.EMPTY:
                raise DictionaryStateError(
                    f"build_from_dir() requires an empty dictionary, "
                    f"current state is '{self._state.value}'"
                )
            self._state = BuildState.BUILDING

        try:
            report = BuildPipeline(self, self._settings).run(
                Path(root_path),
                cancel_token=cancel_token,
                progress_callback=progress_callback,
            )
        finally:
            with self._state_lock:
                self._state = BuildState.BUILT

        self._report = report
        log_info(
            f"[Dictionary] {self._unique_word_count} unique / "
            f"{self.total_word_count} total words"
        )
        return report

    def append_if_not_exists(self, word: str) -> bool:
        """
        Them word vao unique_words neu chua thay.

        Args:
            word: Token da normalize

        Returns:
            True neu word moi duoc them
        """
        # Fast path: duplicates khong bao gio lay lock
        if self._membership.may_contain(word):
            return False

        with self._lock:
            # Re-check: worker khac co the vua insert cung word
            if self._membership.may_contain(word):
                return False
            self._membership.insert(word)
            self._unique_words.append(word)
            self._unique_word_count += 1
            return True

    def count_word(self) -> None:
        """Tang total_word_count, 1 lan / token bat ke duplicate hay khong."""
        self._total_words.increment()

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def snapshot(self) -> DictionarySnapshot:
        """
        Snapshot 3 population fields cho persistence.

        Lay duoi lock nen unique_words va unique_word_count luon khop nhau.
        """
        with self._lock:
            words = tuple(self._unique_words)
            unique = self._unique_word_count
        return DictionarySnapshot(
            unique_words=words,
            total_word_count=self._total_words.value,
            unique_word_count=unique,
        )

    def __repr__(self) -> str:
        return (
            f"Dictionary(state={self.state.value}, "
            f"unique_word_count={self._unique_word_count}, "
            f"total_word_count={self.total_word_count})"
        )
