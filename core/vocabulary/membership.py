"""
Membership Set - Cau truc dedup "word nay da thay chua".

Hai strategies cung mot contract (MembershipSet protocol):
- ExactMembershipSet: Python set, khong false positive/negative
- BloomMembershipSet: rbloom.Bloom (Rust), fixed capacity

TRADEOFF cua Bloom:
- Khong bao gio false negative (word da insert luon duoc bao la co)
- Co the false positive: word MOI bi bao la da thay -> bi drop khoi
  unique_words. Ti le bi gioi han boi false_positive_rate khi so items
  <= expected_items. Caller can vocabulary chinh xac phai dung "exact".

Ca hai chi append (khong delete) trong suot mot build.
may_contain() duoc goi ngoai lock boi Dictionary -> implementations
phai an toan khi doc dong thoi voi mot insert.
"""

from typing import Protocol, runtime_checkable

from rbloom import Bloom

from config.build_settings import (
    DEFAULT_EXPECTED_ITEMS,
    DEFAULT_FALSE_POSITIVE_RATE,
    MEMBERSHIP_STRATEGIES,
)


@runtime_checkable
class MembershipSet(Protocol):
    """Capability ma Dictionary phu thuoc vao, bat ke strategy."""

    def may_contain(self, word: str) -> bool:
        """True neu word (co the) da duoc insert."""
        ...

    def insert(self, word: str) -> None:
        """Them word vao set."""
        ...

    def __len__(self) -> int:
        ...


class ExactMembershipSet:
    """Hashed set, exact. Memory tang theo vocabulary size."""

    def __init__(self) -> None:
        self._words: set[str] = set()

    def may_contain(self, word: str) -> bool:
        return word in self._words

    def insert(self, word: str) -> None:
        self._words.add(word)

    def __len__(self) -> int:
        return len(self._words)


class BloomMembershipSet:
    """
    Bloom filter sized tai construction cho expected vocabulary ceiling.

    Hash function la builtin hash() (mac dinh cua rbloom): on dinh trong
    mot process, nen filter KHONG duoc persist giua cac process.
    """

    def __init__(
        self,
        expected_items: int = DEFAULT_EXPECTED_ITEMS,
        false_positive_rate: float = DEFAULT_FALSE_POSITIVE_RATE,
    ) -> None:
        if expected_items < 1:
            raise ValueError(f"expected_items must be >= 1, got {expected_items}")
        if not 0.0 < false_positive_rate < 1.0:
            raise ValueError(
                f"false_positive_rate must be in (0, 1), got {false_positive_rate}"
            )

        self.expected_items = expected_items
        self.false_positive_rate = false_positive_rate
        self._filter = Bloom(expected_items, false_positive_rate)
        self._inserted = 0

    def may_contain(self, word: str) -> bool:
        return word in self._filter

    def insert(self, word: str) -> None:
        # Dictionary chi goi insert() duoi lock nen counter khong bi race
        self._filter.add(word)
        self._inserted += 1

    def __len__(self) -> int:
        """So lan insert (khong phai so items phan biet that su)."""
        return self._inserted

    @property
    def size_in_bits(self) -> int:
        return self._filter.size_in_bits


def create_membership_set(
    strategy: str = "exact",
    expected_items: int = DEFAULT_EXPECTED_ITEMS,
    false_positive_rate: float = DEFAULT_FALSE_POSITIVE_RATE,
) -> MembershipSet:
    """
    Factory chon strategy theo ten.

    Args:
        strategy: "exact" hoac "bloom"
        expected_items: Capacity cho Bloom filter
        false_positive_rate: FP rate muc tieu cho Bloom filter

    Returns:
        MembershipSet instance moi, rong

    Raises:
        ValueError: Neu strategy khong hop le
    """
    if strategy == "exact":
        return ExactMembershipSet()
    if strategy == "bloom":
        return BloomMembershipSet(expected_items, false_positive_rate)
    raise ValueError(
        f"Unknown membership strategy '{strategy}'. "
        f"Valid strategies: {list(MEMBERSHIP_STRATEGIES)}"
    )
