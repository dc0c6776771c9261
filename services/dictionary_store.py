"""
Dictionary Store - Persist/load DictionarySnapshot.

Format (binary-then-text):
    JSON {"unique_words", "total_word_count", "unique_word_count", "version"}
    -> UTF-8 bytes -> zlib compress -> base64 ASCII text

Ghi file atomic:
1. Ghi vao temp file cung thu muc voi target
2. flush() + os.fsync() -> data xuong durable storage
3. chmod theo mode cua target cu (hoac umask)
4. os.replace() len target (tao moi hoac overwrite)

KHONG bao gio terminate process: loi ghi tra ve SaveResult(success=False).
"""

import base64
import json
import os
import stat
import tempfile
import zlib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Union

from core.logging_config import log_error, log_info
from core.vocabulary.dictionary import DictionarySnapshot

FORMAT_VERSION = 1


class DictionaryStoreError(Exception):
    """Blob khong decode duoc thanh DictionarySnapshot."""


@dataclass
class SaveResult:
    """Ket qua save mot snapshot"""

    path: str
    success: bool
    bytes_written: int = 0
    error: Optional[str] = None


def encode_snapshot(snapshot: DictionarySnapshot) -> str:
    """
    Serialize snapshot thanh base64 text.

    Args:
        snapshot: DictionarySnapshot can encode

    Returns:
        ASCII string
    """
    payload = {
        "version": FORMAT_VERSION,
        "unique_words": list(snapshot.unique_words),
        "total_word_count": snapshot.total_word_count,
        "unique_word_count": snapshot.unique_word_count,
    }
    raw = json.dumps(payload, ensure_ascii=False, separators=(",", ":")).encode("utf-8")
    return base64.b64encode(zlib.compress(raw)).decode("ascii")


def _is_count(value: Any) -> bool:
    # bool la subclass cua int, JSON true/false khong phai count
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def _target_mode(target: Path) -> int:
    """Mode cho file moi: giu mode cua target cu, neu khong thi theo umask."""
    try:
        return stat.S_IMODE(target.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def decode_snapshot(data: str) -> DictionarySnapshot:
    """
    Parse base64 text thanh DictionarySnapshot.

    Raises:
        DictionaryStoreError: Neu data bi hong hoac sai format
    """
    try:
        raw = zlib.decompress(base64.b64decode(data.strip(), validate=True))
        payload: Any = json.loads(raw.decode("utf-8"))
    except (ValueError, zlib.error) as e:
        # ValueError: non-ASCII text, binascii.Error, UnicodeDecodeError, JSONDecodeError
        raise DictionaryStoreError(f"Corrupt dictionary blob: {e}") from e

    if not isinstance(payload, dict) or payload.get("version") != FORMAT_VERSION:
        raise DictionaryStoreError("Unsupported dictionary blob format")

    words = payload.get("unique_words")
    total = payload.get("total_word_count")
    unique = payload.get("unique_word_count")

    if (
        not isinstance(words, list)
        or not all(isinstance(w, str) for w in words)
        or not _is_count(total)
        or not _is_count(unique)
    ):
        raise DictionaryStoreError("Dictionary blob has invalid fields")

    if unique != len(words) or total < unique:
        raise DictionaryStoreError(
            f"Dictionary blob counts do not match: unique_word_count={unique}, "
            f"{len(words)} words, total_word_count={total}"
        )

    return DictionarySnapshot(
        unique_words=tuple(words),
        total_word_count=total,
        unique_word_count=unique,
    )


def save_dictionary(
    snapshot: DictionarySnapshot, file_path: Union[str, Path]
) -> SaveResult:
    """
    Ghi snapshot ra file (atomic, fsync truoc khi release handle).

    Args:
        snapshot: Snapshot tu Dictionary.snapshot()
        file_path: File dich (tao moi hoac overwrite)

    Returns:
        SaveResult, success=False kem error message neu that bai
    """
    target = Path(file_path)
    data = encode_snapshot(snapshot).encode("ascii")
    tmp_name: Optional[str] = None

    try:
        target.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{target.name}.", suffix=".tmp", dir=str(target.parent)
        )
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())

        # mkstemp tao file 0600, os.replace se mang mode do sang target
        os.chmod(tmp_name, _target_mode(target))

        os.replace(tmp_name, target)
        tmp_name = None
    except OSError as e:
        log_error(f"[DictionaryStore] Failed to save dictionary to {target}", e)
        return SaveResult(path=str(target), success=False, error=str(e))
    finally:
        # Don temp file neu replace chua xay ra
        if tmp_name is not None:
            try:
                os.unlink(tmp_name)
            except OSError:
                pass

    log_info(f"[DictionaryStore] Saved {len(data)} bytes to {target}")
    return SaveResult(path=str(target), success=True, bytes_written=len(data))


def load_dictionary(file_path: Union[str, Path]) -> DictionarySnapshot:
    """
    Doc snapshot tu file da save.

    Raises:
        OSError: Neu file khong doc duoc
        DictionaryStoreError: Neu noi dung bi hong
    """
    content = Path(file_path).read_text(encoding="ascii", errors="replace")
    return decode_snapshot(content)
