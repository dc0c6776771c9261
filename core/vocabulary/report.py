"""
Build Report - Ket qua tung item cua mot lan build.

Thay vi nuot loi im lang, moi file duoc discover tao ra mot FileOutcome,
moi loi walk tao ra mot WalkError. Build KHONG bao gio abort vi cac loi nay,
nhung caller co the phan biet "khong co file doc duoc" voi "xu ly xong het".

BuildReport duoc ghi dong thoi boi traversal thread, producer threads
va workers -> moi mutation di qua _lock.
"""

import threading
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional


class OutcomeStatus(str, Enum):
    """Trang thai xu ly cua mot file."""

    READ = "read"  # Doc xong, co it nhat 1 dong
    EMPTY = "empty"  # Doc xong, khong co dong nao
    FAILED = "failed"  # Open/read loi (co the da doc duoc mot phan)
    SKIPPED = "skipped"  # Build bi cancel truoc/giua khi doc


@dataclass
class FileOutcome:
    """Ket qua doc mot file"""

    path: str
    status: OutcomeStatus
    lines: int = 0
    error: Optional[str] = None


@dataclass
class WalkError:
    """Loi tren mot entry khi walk directory"""

    path: str
    error: str


@dataclass
class BuildProgress:
    """
    Progress information trong luc build.

    Attributes:
        files_discovered: So files walker da tim thay
        files_finished: So files da doc xong (moi status)
        lines_read: So dong da dua vao line queue
        tokens_counted: So tokens workers da xu ly
        current_path: File vua duoc discover
    """

    files_discovered: int = 0
    files_finished: int = 0
    lines_read: int = 0
    tokens_counted: int = 0
    current_path: str = ""


@dataclass
class BuildReport:
    """Tong hop outcomes cua mot lan build_from_dir()."""

    root: str
    files: List[FileOutcome] = field(default_factory=list)
    walk_errors: List[WalkError] = field(default_factory=list)
    worker_errors: int = 0
    cancelled: bool = False
    duration: float = 0.0
    _lock: threading.Lock = field(
        default_factory=threading.Lock, repr=False, compare=False
    )

    def add_file(self, outcome: FileOutcome) -> None:
        with self._lock:
            self.files.append(outcome)

    def add_walk_error(self, path: Path, exc: BaseException) -> None:
        with self._lock:
            self.walk_errors.append(WalkError(path=str(path), error=str(exc)))

    def add_worker_error(self) -> None:
        with self._lock:
            self.worker_errors += 1

    @property
    def files_discovered(self) -> int:
        return len(self.files)

    @property
    def files_read(self) -> int:
        """Files doc thanh cong (READ hoac EMPTY)."""
        return sum(
            1
            for f in self.files
            if f.status in (OutcomeStatus.READ, OutcomeStatus.EMPTY)
        )

    @property
    def files_failed(self) -> int:
        return sum(1 for f in self.files if f.status is OutcomeStatus.FAILED)

    @property
    def lines_read(self) -> int:
        return sum(f.lines for f in self.files)

    @property
    def failed_files(self) -> List[FileOutcome]:
        return [f for f in self.files if f.status is OutcomeStatus.FAILED]

    @property
    def has_errors(self) -> bool:
        return bool(self.files_failed or self.walk_errors or self.worker_errors)

    def summary(self) -> str:
        """Mot dong tom tat cho logging."""
        return (
            f"files={self.files_discovered} read={self.files_read} "
            f"failed={self.files_failed} lines={self.lines_read} "
            f"walk_errors={len(self.walk_errors)} worker_errors={self.worker_errors} "
            f"cancelled={self.cancelled} duration={self.duration:.2f}s"
        )
