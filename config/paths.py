"""
Application Paths - Centralized path definitions cho Lexicon Builder

Duong dan va env vars dung chung cho CLI, logging va settings_manager.

App data duoc luu tai: ~/.lexicon-builder/
- logs/          : build.log (rotating)
- settings.json  : Build settings mac dinh
"""

import os
from pathlib import Path


# =============================================================================
# Ten ung dung - Single source of truth cho naming
# =============================================================================
APP_NAME = "lexicon-builder"

# =============================================================================
# Thu muc goc cua ung dung
# =============================================================================
APP_DIR = Path.home() / f".{APP_NAME}"

# =============================================================================
# Cac thu muc con va file
# =============================================================================
LOG_DIR = APP_DIR / "logs"
SETTINGS_FILE = APP_DIR / "settings.json"

# File output mac dinh cua CLI (relative voi working directory)
DEFAULT_OUTPUT_FILE = Path("dict.txt")

# Bat debug logging: LEXICON_DEBUG=1 lexicon-builder data/
DEBUG_ENV_VAR = "LEXICON_DEBUG"

DEBUG_MODE = os.environ.get(DEBUG_ENV_VAR, "").lower() in ("1", "true", "yes")
