"""
File Scanner - Recursive file discovery cho dictionary build

Lazy generator tren os.scandir:
- Recurse vao moi subdirectory (khong follow directory symlinks -> khong loop)
- Chi emit non-directory entries tro toi regular files
- Loi tren tung entry (PermissionError, ...) bi nuot, walk tiep tuc
- Cooperative cancellation qua CancellationToken
- Optional pathspec ignore va binary skip

Generator chay tren traversal thread cua pipeline, nen consumer bat dau
xu ly files truoc khi walk ket thuc.
"""

import os
from pathlib import Path
from typing import Iterator, List, Optional

import pathspec

from core.ignore_engine import is_ignored
from core.tokenization.cancellation import CancellationToken
from core.utils.file_utils import ErrorCallback, is_binary_file


def enumerate_files(
    root_path: Path,
    ignore_spec: Optional[pathspec.PathSpec] = None,
    on_error: Optional[ErrorCallback] = None,
    cancel_token: Optional[CancellationToken] = None,
    skip_binary: bool = False,
) -> Iterator[Path]:
    """
    Liet ke tat ca files duoi root_path (recursive).

    Thu tu phu thuoc filesystem, khong duoc dam bao.
    Root la file -> chi yield chinh file do.

    Args:
        root_path: Thu muc goc
        ignore_spec: PathSpec de loai files/folders (None = khong loai gi)
        on_error: Callback (path, exc) cho moi entry khong stat/list duoc
        cancel_token: Dung walk khi token bi cancel
        skip_binary: Bo qua files binary

    Yields:
        Path cua tung regular file
    """
    try:
        if not root_path.is_dir():
            if root_path.is_file():
                if not (skip_binary and is_binary_file(root_path)):
                    yield root_path
                return
            raise FileNotFoundError(
                2, "No such file or directory", str(root_path)
            )
    except OSError as e:
        if on_error:
            on_error(root_path, e)
        return

    # Explicit stack thay vi recursion -> khong bi gioi han recursion depth
    pending: List[Path] = [root_path]

    while pending:
        if cancel_token is not None and cancel_token.is_cancelled():
            return

        current = pending.pop()

        try:
            with os.scandir(current) as entries_iter:
                entries = list(entries_iter)
        except OSError as e:
            if on_error:
                on_error(current, e)
            continue

        for entry in entries:
            if cancel_token is not None and cancel_token.is_cancelled():
                return

            entry_path = Path(entry.path)

            try:
                if entry.is_dir(follow_symlinks=False):
                    if not is_ignored(ignore_spec, entry_path, root_path, is_dir=True):
                        pending.append(entry_path)
                    continue

                # Symlink toi file van duoc ingest; symlink hong, FIFO, socket bi bo qua
                if not entry.is_file():
                    continue
            except OSError as e:
                if on_error:
                    on_error(entry_path, e)
                continue

            if is_ignored(ignore_spec, entry_path, root_path):
                continue

            if skip_binary and is_binary_file(entry_path):
                continue

            yield entry_path
