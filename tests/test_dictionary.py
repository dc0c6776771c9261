"""
Tests cho Dictionary aggregate va build pipeline.

Verify:
1. Idempotent dedup trong append_if_not_exists()
2. Concurrent insert race (lap lai nhieu lan de bat loi lock discipline)
3. Count invariants sau build, voi ca exact va Bloom
4. Order independence qua nhieu lan build
5. Empty/unreadable files khong lam hong build
6. State machine: double build fail fast, cancellation
"""

import os
import threading
import time
from pathlib import Path

import pytest

from config.build_settings import BuildSettings
from core.tokenization.cancellation import CancellationToken
from core.tokenization.tokenizer import tokenize
from core.utils import file_utils
from core.vocabulary.dictionary import (
    BuildState,
    Dictionary,
    DictionaryStateError,
)
from core.vocabulary.membership import ExactMembershipSet
from core.vocabulary.report import OutcomeStatus

# Ky vong cua fixture sample_tree (xem conftest.py)
SAMPLE_TOTAL_WORDS = 13
SAMPLE_UNIQUE_WORDS = {"hello", "world", "again", "of", "words", "no", "newline", "at", "end"}

_IS_ROOT = hasattr(os, "geteuid") and os.geteuid() == 0


class SlowExactSet(ExactMembershipSet):
    """ExactMembershipSet nhuong GIL trong may_contain de mo rong race window."""

    def may_contain(self, word: str) -> bool:
        result = super().may_contain(word)
        time.sleep(0)
        return result


def _assert_invariants(d: Dictionary) -> None:
    assert d.unique_word_count == len(d.unique_words)
    assert len(set(d.unique_words)) == len(d.unique_words)
    assert d.total_word_count >= d.unique_word_count


# ============================================================
# append_if_not_exists
# ============================================================


class TestAppendIfNotExists:
    """Dedup critical section."""

    def test_new_word_appended(self):
        d = Dictionary()
        assert d.append_if_not_exists("hello") is True
        assert d.unique_words == ["hello"]
        assert d.unique_word_count == 1

    def test_repeated_inserts_idempotent(self):
        """Insert nhieu lan -> xuat hien dung 1 lan, count tang dung 1."""
        d = Dictionary()
        results = [d.append_if_not_exists("repeat") for _ in range(5)]
        assert results == [True, False, False, False, False]
        assert d.unique_words == ["repeat"]
        assert d.unique_word_count == 1

    def test_insertion_order_kept(self):
        d = Dictionary()
        for w in ["b", "a", "b", "c"]:
            d.append_if_not_exists(w)
        assert d.unique_words == ["b", "a", "c"]

    def test_count_word_independent_of_dedup(self):
        """total_word_count tang moi token, ke ca duplicate."""
        d = Dictionary()
        for w in ["x", "x", "y"]:
            d.count_word()
            d.append_if_not_exists(w)
        assert d.total_word_count == 3
        assert d.unique_word_count == 2

    def test_unique_words_returns_copy(self):
        d = Dictionary()
        d.append_if_not_exists("a")
        d.unique_words.append("mutated")
        assert d.unique_words == ["a"]


class TestConcurrentInsertRace:
    """Nhieu threads insert cung word cung luc."""

    @pytest.mark.parametrize("thread_count", [1, 2, 8, 64])
    def test_same_word_counted_once(self, thread_count):
        """Lap lai 20 lan: unique_word_count luon == 1."""
        for _ in range(20):
            d = Dictionary(membership=SlowExactSet())
            barrier = threading.Barrier(thread_count)

            def insert():
                barrier.wait()
                d.append_if_not_exists("contended")

            threads = [threading.Thread(target=insert) for _ in range(thread_count)]
            for t in threads:
                t.start()
            for t in threads:
                t.join()

            assert d.unique_word_count == 1
            assert d.unique_words == ["contended"]

    def test_many_words_many_threads(self):
        """Moi thread insert cung tap 200 words -> moi word dung 1 lan."""
        words = [f"w{i}" for i in range(200)]
        d = Dictionary(membership=SlowExactSet())
        barrier = threading.Barrier(16)

        def insert_all():
            barrier.wait()
            for w in words:
                d.count_word()
                d.append_if_not_exists(w)

        threads = [threading.Thread(target=insert_all) for _ in range(16)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sorted(d.unique_words) == sorted(words)
        assert d.unique_word_count == 200
        assert d.total_word_count == 200 * 16
        _assert_invariants(d)


# ============================================================
# build_from_dir
# ============================================================


class TestBuildFromDir:
    """End-to-end build tren sample_tree."""

    @pytest.mark.parametrize("strategy", ["exact", "bloom"])
    def test_counts_and_words(self, sample_tree, small_settings, strategy):
        small_settings.membership_strategy = strategy
        small_settings.expected_items = 1000
        small_settings.false_positive_rate = 0.001

        d = Dictionary(small_settings)
        report = d.build_from_dir(sample_tree)

        assert d.state is BuildState.BUILT
        assert d.total_word_count == SAMPLE_TOTAL_WORDS
        assert d.unique_word_count == len(SAMPLE_UNIQUE_WORDS)
        assert set(d.unique_words) == SAMPLE_UNIQUE_WORDS
        _assert_invariants(d)

        assert report.files_discovered == 4
        assert report.files_read == 4
        assert report.files_failed == 0
        assert report.lines_read == 5
        assert not report.cancelled
        assert not report.has_errors
        assert d.report is report

    def test_total_matches_tokenizer(self, sample_tree, small_settings):
        """total_word_count == tong so token cua moi dong."""
        expected = 0
        for path in sample_tree.rglob("*"):
            if path.is_file():
                with open(path, encoding="utf-8") as f:
                    expected += sum(len(tokenize(line)) for line in f)

        d = Dictionary(small_settings)
        d.build_from_dir(sample_tree)
        assert d.total_word_count == expected

    def test_order_independent(self, sample_tree, small_settings):
        """Nhieu lan build -> cung counts va cung tap words."""
        results = set()
        for workers in (1, 3, 16, 16, 16):
            small_settings.worker_count = workers
            d = Dictionary(small_settings)
            d.build_from_dir(sample_tree)
            results.add(
                (
                    d.total_word_count,
                    d.unique_word_count,
                    frozenset(d.unique_words),
                )
            )
        assert len(results) == 1

    def test_large_tree(self, tmp_path, small_settings):
        """Nhieu files va dong hon so workers."""
        for i in range(30):
            sub = tmp_path / f"dir{i % 5}"
            sub.mkdir(exist_ok=True)
            lines = "\n".join(f"shared word{i} line{j}" for j in range(20))
            (sub / f"f{i}.txt").write_text(lines, encoding="utf-8")

        d = Dictionary(small_settings)
        report = d.build_from_dir(tmp_path)

        assert report.files_discovered == 30
        assert d.total_word_count == 30 * 20 * 3
        # shared + word0..29 + line0..19
        assert d.unique_word_count == 1 + 30 + 20
        _assert_invariants(d)

    def test_empty_directory(self, tmp_path, small_settings):
        d = Dictionary(small_settings)
        report = d.build_from_dir(tmp_path)
        assert d.total_word_count == 0
        assert d.unique_words == []
        assert report.files_discovered == 0
        assert d.state is BuildState.BUILT

    def test_missing_root_reported_not_raised(self, tmp_path, small_settings):
        """Root khong ton tai -> report co walk error, khong raise."""
        d = Dictionary(small_settings)
        report = d.build_from_dir(tmp_path / "nope")
        assert report.files_discovered == 0
        assert len(report.walk_errors) == 1
        assert report.has_errors

    def test_accepts_str_root(self, sample_tree, small_settings):
        d = Dictionary(small_settings)
        d.build_from_dir(str(sample_tree))
        assert d.total_word_count == SAMPLE_TOTAL_WORDS


class TestErrorTolerance:
    """Empty va unreadable files."""

    def test_empty_and_unreadable_files(self, tmp_path, small_settings, monkeypatch):
        """1 file rong + 1 file khong doc duoc -> 0 tokens, build van xong."""
        (tmp_path / "empty.txt").write_text("", encoding="utf-8")
        (tmp_path / "locked.txt").write_text("hidden words\n", encoding="utf-8")
        (tmp_path / "ok.txt").write_text("visible\n", encoding="utf-8")

        real_open = open

        def fake_open(file, *args, **kwargs):
            if str(file).endswith("locked.txt"):
                raise PermissionError(13, "Permission denied", str(file))
            return real_open(file, *args, **kwargs)

        monkeypatch.setattr(file_utils, "open", fake_open, raising=False)

        d = Dictionary(small_settings)
        report = d.build_from_dir(tmp_path)

        assert d.unique_words == ["visible"]
        assert d.total_word_count == 1

        statuses = {Path(o.path).name: o.status for o in report.files}
        assert statuses == {
            "empty.txt": OutcomeStatus.EMPTY,
            "locked.txt": OutcomeStatus.FAILED,
            "ok.txt": OutcomeStatus.READ,
        }
        assert report.files_failed == 1
        assert "Permission denied" in report.failed_files[0].error

    @pytest.mark.skipif(
        _IS_ROOT or not hasattr(os, "geteuid"),
        reason="root can read files without permission bits",
    )
    def test_chmod_unreadable_file(self, tmp_path, small_settings):
        locked = tmp_path / "locked.txt"
        locked.write_text("hidden\n", encoding="utf-8")
        locked.chmod(0)
        try:
            d = Dictionary(small_settings)
            report = d.build_from_dir(tmp_path)
        finally:
            locked.chmod(0o644)

        assert d.total_word_count == 0
        assert report.files_failed == 1


# ============================================================
# State machine & cancellation
# ============================================================


class TestLifecycle:
    """EMPTY -> BUILDING -> BUILT."""

    def test_initial_state(self):
        d = Dictionary()
        assert d.state is BuildState.EMPTY
        assert d.report is None

    def test_double_build_fails_fast(self, sample_tree, small_settings):
        d = Dictionary(small_settings)
        d.build_from_dir(sample_tree)
        with pytest.raises(DictionaryStateError):
            d.build_from_dir(sample_tree)
        # Khong tich luy them
        assert d.total_word_count == SAMPLE_TOTAL_WORDS

    def test_state_is_building_during_build(self, sample_tree, small_settings):
        """Progress callback chay trong luc BUILDING."""
        small_settings.progress_interval_ms = 0
        d = Dictionary(small_settings)
        seen_states = []
        d.build_from_dir(sample_tree, progress_callback=lambda p: seen_states.append(d.state))
        assert seen_states
        assert BuildState.BUILDING in seen_states

    def test_invalid_settings_rejected(self):
        with pytest.raises(ValueError):
            Dictionary(BuildSettings(worker_count=0))

    def test_snapshot_matches_state(self, sample_tree, small_settings):
        d = Dictionary(small_settings)
        d.build_from_dir(sample_tree)
        snap = d.snapshot()
        assert snap.total_word_count == SAMPLE_TOTAL_WORDS
        assert snap.unique_word_count == len(snap.unique_words)
        assert set(snap.unique_words) == SAMPLE_UNIQUE_WORDS


class TestCancellation:
    """CancellationToken propagate toi moi tier."""

    def test_cancel_before_build(self, sample_tree, small_settings):
        token = CancellationToken()
        token.cancel()
        d = Dictionary(small_settings)
        report = d.build_from_dir(sample_tree, cancel_token=token)

        assert report.cancelled
        assert d.state is BuildState.BUILT
        assert d.total_word_count == 0

    def test_cancel_during_build_completes_barrier(self, tmp_path, small_settings):
        """Cancel giua chung -> build_from_dir van return, ket qua partial."""
        for i in range(50):
            (tmp_path / f"f{i}.txt").write_text("a b c\n" * 200, encoding="utf-8")

        small_settings.progress_interval_ms = 0
        token = CancellationToken()

        def cancel_on_first_progress(progress):
            if progress.files_discovered >= 1:
                token.cancel()

        d = Dictionary(small_settings)
        report = d.build_from_dir(
            tmp_path, cancel_token=token, progress_callback=cancel_on_first_progress
        )

        assert report.cancelled
        assert d.total_word_count < 50 * 200 * 3
        _assert_invariants(d)

    def test_progress_callback_errors_ignored(self, sample_tree, small_settings):
        small_settings.progress_interval_ms = 0

        def broken(progress):
            raise RuntimeError("boom")

        d = Dictionary(small_settings)
        report = d.build_from_dir(sample_tree, progress_callback=broken)
        assert d.total_word_count == SAMPLE_TOTAL_WORDS
        assert not report.cancelled
