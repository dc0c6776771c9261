"""
Settings Manager - Quan ly load/save BuildSettings mac dinh.

File: ~/.lexicon-builder/settings.json

API:
    settings = load_build_settings()  # -> BuildSettings
    save_build_settings(settings)
    update_build_setting(worker_count=64)
"""

import json
import threading
from pathlib import Path
from typing import Any, Optional

from config.build_settings import BuildSettings
from config.paths import SETTINGS_FILE

# Thread-safe lock de tranh race condition khi save settings
_settings_lock = threading.Lock()


def _load_unlocked(settings_file: Path) -> BuildSettings:
    """
    Load settings tu file KHONG co lock.

    Returns:
        BuildSettings voi values tu file + defaults
    """
    try:
        if settings_file.exists():
            content = settings_file.read_text(encoding="utf-8")
            saved = json.loads(content)
            if isinstance(saved, dict):
                return BuildSettings.from_dict(saved)
    except (OSError, json.JSONDecodeError):
        pass
    return BuildSettings()


def _save_unlocked(settings: BuildSettings, settings_file: Path) -> bool:
    """
    Save BuildSettings ra file KHONG co lock.

    Merge voi existing data de bao toan extra keys.

    Returns:
        True neu save thanh cong
    """
    try:
        existing_data: dict[str, Any] = {}
        try:
            if settings_file.exists():
                loaded = json.loads(settings_file.read_text(encoding="utf-8"))
                if isinstance(loaded, dict):
                    existing_data = loaded
        except (OSError, json.JSONDecodeError):
            pass

        updated = {**existing_data, **settings.to_dict()}
        settings_file.parent.mkdir(parents=True, exist_ok=True)
        settings_file.write_text(json.dumps(updated, indent=2), encoding="utf-8")
        return True
    except OSError:
        return False


def load_build_settings(settings_file: Optional[Path] = None) -> BuildSettings:
    """
    Load settings tu file va tra ve BuildSettings typed instance.

    File khong ton tai hoac loi -> defaults.

    Args:
        settings_file: Override path (default ~/.lexicon-builder/settings.json)
    """
    return _load_unlocked(settings_file or SETTINGS_FILE)


def save_build_settings(
    settings: BuildSettings, settings_file: Optional[Path] = None
) -> bool:
    """
    Save BuildSettings ra file (thread-safe).

    Returns:
        True neu save thanh cong
    """
    with _settings_lock:
        return _save_unlocked(settings, settings_file or SETTINGS_FILE)


def update_build_setting(
    settings_file: Optional[Path] = None, **kwargs: Any
) -> bool:
    """
    Update mot hoac nhieu fields cung luc (thread-safe, atomic read-modify-write).

    Raises:
        TypeError: Neu key khong phai la BuildSettings field
    """
    valid_fields = set(BuildSettings.__dataclass_fields__)
    for key in kwargs:
        if key not in valid_fields:
            raise TypeError(
                f"'{key}' is not a valid BuildSettings field. "
                f"Valid fields: {sorted(valid_fields)}"
            )

    path = settings_file or SETTINGS_FILE
    with _settings_lock:
        settings = _load_unlocked(path)
        for key, value in kwargs.items():
            setattr(settings, key, value)
        return _save_unlocked(settings, path)
