"""Translations for MaizeScan (English and Urdu).

Usage: from i18n import t; t("key", name=value)
"""

import json
import logging
import sys
from collections import OrderedDict
from pathlib import Path

from PyQt6.QtCore import QSettings

from core.utils import APP_NAME, ORG_NAME

logger = logging.getLogger(__name__)

LANGUAGES = OrderedDict([
    ("en", {"name": "English", "native_name": "English"}),
    ("ur", {"name": "Urdu", "native_name": "اردو"}),
])

_translations: dict = {}
_fallback: dict = {}
_current_lang: str = "en"


def _get_i18n_dir() -> Path:
    if getattr(sys, "frozen", False):
        return Path(sys._MEIPASS) / "i18n"
    return Path(__file__).parent


def _load_json(lang_code: str) -> dict:
    path = _get_i18n_dir() / f"{lang_code}.json"
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (FileNotFoundError, json.JSONDecodeError) as exc:
        logger.warning("Could not load translations %s: %s", path.name, exc)
        return {}


def load_language(code: str):
    """Activate a language for this process without touching saved preferences."""
    global _translations, _fallback, _current_lang
    _current_lang = code if code in LANGUAGES else "en"
    _fallback = _load_json("en")
    _translations = _fallback if _current_lang == "en" else _load_json(_current_lang)


def init():
    """Load the saved language. Call once at app startup."""
    settings = QSettings(ORG_NAME, APP_NAME)
    load_language(settings.value("language", "en"))


def t(key: str, **kwargs) -> str:
    """Translate a key with optional format arguments.

    Falls back: current language -> English -> raw key.
    """
    if not _fallback:
        load_language(_current_lang)
    text = _translations.get(key) or _fallback.get(key) or key
    if kwargs:
        try:
            return text.format(**kwargs)
        except (KeyError, IndexError, ValueError):
            return text
    return text


def get_current_language() -> str:
    return _current_lang


def set_language(code: str):
    """Save language preference. Takes effect on restart."""
    settings = QSettings(ORG_NAME, APP_NAME)
    settings.setValue("language", code)


def is_rtl() -> bool:
    meta = _translations.get("_meta", {})
    if isinstance(meta, dict):
        return meta.get("direction", "ltr") == "rtl"
    return False
