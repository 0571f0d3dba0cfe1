"""Shared helpers for settings components."""

from pathlib import Path

from decouple import AutoConfig

# Repository root: upload-server/
BASE_DIR = Path(__file__).parent.parent.parent.parent

# Reads config/.env first, then falls back to the process environment.
config = AutoConfig(search_path=BASE_DIR.joinpath('config'))
