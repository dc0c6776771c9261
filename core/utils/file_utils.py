"""
File System Utilities - Streaming line source va binary detection.

Cung cap:
- enumerate_file(): Lazy generator doc tung dong cua mot file
- is_binary_file(): Phat hien file binary (extension, null bytes, magic bytes)

Error policy: file khong doc duoc -> sequence rong, KHONG raise.
Loi duoc bao cho caller qua on_error callback (neu co) de dua vao BuildReport.
"""

from pathlib import Path
from typing import Callable, Iterator, Optional

import filetype

# Callback nhan (path, exception) khi mot file/entry khong doc duoc
ErrorCallback = Callable[[Path, OSError], None]

# Extension chac chan la binary -> skip khong can I/O
BINARY_EXTENSIONS = frozenset(
    {
        ".png", ".jpg", ".jpeg", ".gif", ".bmp", ".ico", ".webp",
        ".pdf", ".zip", ".gz", ".tar", ".7z", ".rar", ".bz2", ".xz",
        ".exe", ".dll", ".so", ".dylib", ".o", ".a", ".class", ".pyc",
        ".mp3", ".mp4", ".wav", ".avi", ".mov", ".mkv", ".flac", ".ogg",
        ".ttf", ".otf", ".woff", ".woff2", ".sqlite", ".db", ".bin",
    }
)

# Chi doc 8KB dau de check binary
BINARY_PROBE_BYTES = 8192


def enumerate_file(
    file_path: Path,
    on_error: Optional[ErrorCallback] = None,
) -> Iterator[str]:
    """
    Doc file theo tung dong, lazy (khong load ca file vao memory).

    - Open fail -> sequence rong ngay lap tuc
    - Read fail giua chung -> dung lai, cac dong da yield van giu nguyen
    - Dong cuoi khong co newline van duoc yield nhu mot dong hop le
    - Bytes khong decode duoc UTF-8 bi thay bang U+FFFD

    Args:
        file_path: Duong dan file can doc
        on_error: Callback (path, exc) khi open/read that bai

    Yields:
        Tung dong text (con giu newline o cuoi neu co)
    """
    try:
        f = open(file_path, "r", encoding="utf-8", errors="replace")
    except OSError as e:
        if on_error:
            on_error(file_path, e)
        return

    with f:
        try:
            for line in f:
                yield line
        except OSError as e:
            if on_error:
                on_error(file_path, e)


def is_binary_file(file_path: Path) -> bool:
    """
    Check if file is binary using extension, null bytes, and magic bytes.

    OPTIMIZED: Check extension first (no I/O), then content probe if needed.
    File khong doc duoc tra ve False de line source tu bao loi.
    """
    # 1. Check extension first (FAST - no I/O)
    if file_path.suffix.lower() in BINARY_EXTENSIONS:
        return True

    try:
        with open(file_path, "rb") as f:
            chunk = f.read(BINARY_PROBE_BYTES)
    except OSError:
        return False

    if not chunk:
        return False

    # 2. Null bytes (FAST)
    if b"\x00" in chunk:
        return True

    # 3. Magic bytes voi filetype library
    return filetype.guess(chunk) is not None
