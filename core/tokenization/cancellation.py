"""
Cancellation token cho dictionary build - thread-safe.

Mot token duoc truyen xuong ca 3 tiers cua pipeline:
- Traversal thread: dung discover files
- Producer tasks: dung doc file va dung put lines
- Workers: bo qua lines con lai trong queue

Su dung threading.Event nen doc/ghi tu nhieu threads khong can lock.
"""

import threading
from typing import Optional


class CancellationToken:
    """
    Handle de cancel mot build dang chay.

    Usage:
        token = CancellationToken()
        report = dictionary.build_from_dir(root, cancel_token=token)

        # Tu thread khac (vd: SIGINT handler)
        token.cancel()
    """

    def __init__(self, event: Optional[threading.Event] = None):
        self._event = event or threading.Event()

    def cancel(self) -> None:
        """Signal tat ca tiers dung lai."""
        self._event.set()

    def is_cancelled(self) -> bool:
        """Check xem build da bi cancel chua."""
        return self._event.is_set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        Block den khi bi cancel hoac het timeout.

        Returns:
            True neu da bi cancel
        """
        return self._event.wait(timeout)
