"""
Word tokenizer cho dictionary build.

Quy tac (theo thu tu):
1. Xoa cac ky tu: , " / . » «
2. Lowercase
3. Split theo whitespace, bo fragments rong

Pure function, khong co shared state -> thread-safe cho worker pool.
"""

from typing import List

# Cac ky tu bi xoa truoc khi split. Xoa (khong thay bang space) nen
# "foo.bar" -> "foobar".
STRIPPED_CHARS = ',"/.»«'

_STRIP_TABLE = str.maketrans("", "", STRIPPED_CHARS)


def tokenize(line: str) -> List[str]:
    """
    Tach mot dong text thanh danh sach word tokens da normalize.

    Args:
        line: Mot dong text (co the con newline o cuoi)

    Returns:
        List tokens theo thu tu xuat hien, [] neu line rong
    """
    return line.translate(_STRIP_TABLE).lower().split()
