"""
AtomicCounter - Counter thread-safe, doc lap voi moi lock khac.

Moi counter co lock rieng nen increment tu nhieu workers khong tranh chap
voi critical section dedup cua Dictionary.
"""

import threading


class AtomicCounter:
    """Monotonic counter an toan khi nhieu threads cung increment."""

    def __init__(self, initial: int = 0):
        self._value = initial
        self._lock = threading.Lock()

    def increment(self, amount: int = 1) -> int:
        """
        Cong amount vao counter.

        Returns:
            Gia tri moi sau khi cong
        """
        with self._lock:
            self._value += amount
            return self._value

    @property
    def value(self) -> int:
        with self._lock:
            return self._value

    def __int__(self) -> int:
        return self.value
