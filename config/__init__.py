"""
Config Package - Chua cac constants va cau hinh cua ung dung

Bao gom:
- paths: App directories, log dir, debug env var
- build_settings: Typed settings cho mot lan build dictionary
"""

from config.build_settings import (
    BuildSettings,
    MEMBERSHIP_STRATEGIES,
    DEFAULT_WORKER_COUNT,
    DEFAULT_EXPECTED_ITEMS,
)

__all__ = [
    "BuildSettings",
    "MEMBERSHIP_STRATEGIES",
    "DEFAULT_WORKER_COUNT",
    "DEFAULT_EXPECTED_ITEMS",
]
