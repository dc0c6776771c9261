"""
BuildSettings - Typed settings dataclass cho mot lan build dictionary.

Thay the Dict[str, Any] bang dataclass co type hints, validation va default values.
Settings duoc load tu ~/.lexicon-builder/settings.json (xem services/settings_manager.py)
va co the bi override boi CLI flags.

Modules:
- BuildSettings: Dataclass chua toan bo build settings
- from_dict(): Tao BuildSettings tu dict (bo qua keys la va value sai type)
- to_dict(): Chuyen doi BuildSettings thanh dict de luu xuong file
- validate(): Fail-fast khi settings khong hop le

Su dung:
    settings = BuildSettings(worker_count=16, membership_strategy="bloom")
    settings.validate()
"""

import typing
from dataclasses import dataclass, field
from typing import Any


# === Default values cho settings ===
# So worker threads xu ly lines (bounded pool, doc lap voi so file)
DEFAULT_WORKER_COUNT = 250

# So threads doc file (producer tier). So producer tasks = so file.
DEFAULT_READER_COUNT = 32

# Kich thuoc line queue. 1 ~ unbuffered channel: producer block den khi worker nhan.
DEFAULT_LINE_BUFFER_SIZE = 1

# Bloom filter sizing cho vocabulary lon
DEFAULT_EXPECTED_ITEMS = 1_000_000
DEFAULT_FALSE_POSITIVE_RATE = 0.01

MEMBERSHIP_STRATEGIES = ("exact", "bloom")


@dataclass
class BuildSettings:
    """
    Typed settings cho Dictionary.build_from_dir().

    Moi field tuong ung voi mot key trong settings.json.
    """

    # --- Concurrency ---
    worker_count: int = DEFAULT_WORKER_COUNT
    reader_count: int = DEFAULT_READER_COUNT
    line_buffer_size: int = DEFAULT_LINE_BUFFER_SIZE

    # --- Deduplication ---
    # "exact" (set) hoac "bloom" (xac suat, co the drop tu moi do false positive)
    membership_strategy: str = "exact"
    expected_items: int = DEFAULT_EXPECTED_ITEMS
    false_positive_rate: float = DEFAULT_FALSE_POSITIVE_RATE

    # --- Directory walk ---
    # Gitignore-style patterns bi loai khoi walk. Rong = ingest moi file.
    excluded_patterns: list[str] = field(default_factory=list)
    use_gitignore: bool = False
    skip_binary_files: bool = False

    # --- Progress ---
    progress_interval_ms: int = 200

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BuildSettings":
        """
        Tao BuildSettings tu dict, chi lay cac keys trung voi field names.

        Value co type khong khop voi field declaration se bi bo qua
        va dung default thay the. Khong raise loi.

        Args:
            data: Dict settings (thuong tu settings.json)

        Returns:
            BuildSettings instance voi values tu dict, fallback ve defaults
        """
        field_types: dict[str, Any] = {
            f.name: f.type for f in cls.__dataclass_fields__.values()
        }

        filtered: dict[str, Any] = {}
        for key, value in data.items():
            if key not in field_types:
                continue

            expected_type = field_types[key]

            # Xu ly truong hop type annotation la string (forward ref)
            if isinstance(expected_type, str):
                type_map = {"str": str, "bool": bool, "int": int, "float": float}
                expected_type = type_map.get(expected_type, str)

            # isinstance(True, int) == True, nhung bool khong phai count hop le
            if expected_type in (int, float) and isinstance(value, bool):
                continue

            # JSON "1" cho float field van hop le
            if expected_type is float and isinstance(value, int):
                value = float(value)

            origin = typing.get_origin(expected_type)
            check_type = origin if origin is not None else expected_type

            if isinstance(value, check_type):
                if check_type is list:
                    value = [str(item) for item in value]
                filtered[key] = value

        return cls(**filtered)

    def to_dict(self) -> dict[str, Any]:
        """
        Chuyen doi BuildSettings thanh dict de luu xuong file.

        Returns:
            Dict voi toan bo settings
        """
        return {
            "worker_count": self.worker_count,
            "reader_count": self.reader_count,
            "line_buffer_size": self.line_buffer_size,
            "membership_strategy": self.membership_strategy,
            "expected_items": self.expected_items,
            "false_positive_rate": self.false_positive_rate,
            "excluded_patterns": list(self.excluded_patterns),
            "use_gitignore": self.use_gitignore,
            "skip_binary_files": self.skip_binary_files,
            "progress_interval_ms": self.progress_interval_ms,
        }

    def validate(self) -> None:
        """
        Kiem tra settings truoc khi build.

        Raises:
            ValueError: Neu co field khong hop le
        """
        for name in ("worker_count", "reader_count", "line_buffer_size", "expected_items"):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be >= 1, got {getattr(self, name)}")

        if not 0.0 < self.false_positive_rate < 1.0:
            raise ValueError(
                f"false_positive_rate must be in (0, 1), got {self.false_positive_rate}"
            )

        if self.membership_strategy not in MEMBERSHIP_STRATEGIES:
            raise ValueError(
                f"Unknown membership strategy '{self.membership_strategy}'. "
                f"Valid strategies: {list(MEMBERSHIP_STRATEGIES)}"
            )

        if self.progress_interval_ms < 0:
            raise ValueError("progress_interval_ms must be >= 0")
