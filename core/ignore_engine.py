"""
Ignore Engine - Quyet dinh file/folder nao bi loai khoi directory walk.

Mac dinh KHONG loai gi ca: moi regular file duoi root deu duoc ingest.
Patterns chi duoc ap dung khi caller cau hinh:
- excluded_patterns: User patterns (gitignore format)
- use_gitignore: Doc .gitignore + .git/info/exclude o root, va loai VCS dirs

Cung cap:
- build_ignore_patterns(): Tap hop patterns tu user + gitignore
- build_pathspec(): Tao pathspec.PathSpec, None neu khong co pattern nao
- read_gitignore(): Doc gitignore files cua root
- is_ignored(): Match mot path (relative voi root) voi spec
"""

from pathlib import Path
from typing import List, Optional

import pathspec

# === Cac VCS directories bi exclude khi use_gitignore ===
VCS_DIRS = [".git/", ".hg/", ".svn/"]


def build_ignore_patterns(
    root_path: Path,
    *,
    excluded_patterns: Optional[List[str]] = None,
    use_gitignore: bool = False,
) -> List[str]:
    """
    Tap hop tat ca ignore patterns tu nhieu nguon.

    Thu tu: User > VCS > Gitignore. Gitignore negation (!pattern) co the
    override user patterns vi pathspec ap dung pattern sau cung thang.

    Args:
        root_path: Thu muc goc cua build
        excluded_patterns: Danh sach patterns tu user (gitignore format)
        use_gitignore: Co doc .gitignore khong

    Returns:
        List cac ignore patterns (gitignore format)
    """
    patterns: List[str] = []

    if excluded_patterns:
        patterns.extend(p.strip() for p in excluded_patterns if p and p.strip())

    if use_gitignore:
        patterns.extend(VCS_DIRS)
        patterns.extend(read_gitignore(root_path))

    return patterns


def build_pathspec(
    root_path: Path,
    *,
    excluded_patterns: Optional[List[str]] = None,
    use_gitignore: bool = False,
) -> Optional[pathspec.PathSpec]:
    """
    Tao pathspec.PathSpec tu tat ca ignore patterns.

    Returns:
        PathSpec object, hoac None neu khong co pattern nao (walk khong can match)
    """
    patterns = build_ignore_patterns(
        root_path,
        excluded_patterns=excluded_patterns,
        use_gitignore=use_gitignore,
    )
    if not patterns:
        return None
    return pathspec.PathSpec.from_lines("gitwildmatch", patterns)


def read_gitignore(root_path: Path) -> List[str]:
    """
    Doc .gitignore va .git/info/exclude cua root.

    File khong doc duoc bi bo qua (khong raise).

    Args:
        root_path: Thu muc goc chua .gitignore

    Returns:
        List cac gitignore patterns (raw lines tu file)
    """
    patterns: List[str] = []

    for candidate in (
        root_path / ".gitignore",
        root_path / ".git" / "info" / "exclude",
    ):
        if not candidate.is_file():
            continue
        try:
            content = candidate.read_text(encoding="utf-8", errors="replace")
            patterns.extend(content.splitlines())
        except OSError:
            pass

    return patterns


def is_ignored(
    spec: Optional[pathspec.PathSpec],
    path: Path,
    root_path: Path,
    is_dir: bool = False,
) -> bool:
    """
    Check path co bi ignore khong.

    Directories duoc match voi trailing "/" de patterns kieu "build/" hoat dong.

    Args:
        spec: PathSpec tu build_pathspec() (None = khong ignore gi)
        path: Path can check
        root_path: Root cua walk
        is_dir: Path co phai directory khong

    Returns:
        True neu path bi ignore
    """
    if spec is None:
        return False

    try:
        rel_path = path.relative_to(root_path)
    except ValueError:
        return False

    rel_path_str = rel_path.as_posix()
    if is_dir:
        rel_path_str += "/"

    return spec.match_file(rel_path_str)
