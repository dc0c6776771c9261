"""Shared fixtures cho dictionary build tests."""

import pytest

from config.build_settings import BuildSettings

@pytest.fixture
def sample_tree(tmp_path):
    """
    Directory tree nho voi ket qua biet truoc.

    root/
      a.txt            "Hello world" / "hello again"        -> 4 tokens
      empty.txt        ""                                    -> 0 tokens
      sub/b.txt        "World, of words." / "no newline at end" (khong co \\n) -> 7
      sub/deeper/c.txt "«again» again"                       -> 2 tokens
    """
    root = tmp_path / "corpus"
    deeper = root / "sub" / "deeper"
    deeper.mkdir(parents=True)

    (root / "a.txt").write_text("Hello world\nhello again\n", encoding="utf-8")
    (root / "empty.txt").write_text("", encoding="utf-8")
    (root / "sub" / "b.txt").write_text(
        "World, of words.\nno newline at end", encoding="utf-8"
    )
    (deeper / "c.txt").write_text("«again» again\n", encoding="utf-8")
    return root


@pytest.fixture
def small_settings():
    """Settings nho de tests chay nhanh."""
    return BuildSettings(worker_count=8, reader_count=4, line_buffer_size=1)
