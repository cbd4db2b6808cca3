"""Locale negotiation and message catalogues (krishiai/messages/<locale>.json)."""
import json
import logging
import os
from functools import lru_cache
from typing import Any, Dict, List, Optional, Tuple

from krishiai.config import get_default_locale
from krishiai.errors import UnsupportedLocale

logger = logging.getLogger(__name__)

LOCALES = ["en", "es"]
FALLBACK_LOCALE = "en"
MESSAGES_DIR = os.path.join(os.path.dirname(__file__), "messages")


@lru_cache(maxsize=32)
def _read_catalogue(path: str) -> Dict[str, Any]:
    with open(path, encoding="utf-8") as fh:
        return json.load(fh)


def load_messages(locale: str, messages_dir: Optional[str] = None) -> Dict[str, Any]:
    """Return the message catalogue for `locale`.

    Raises UnsupportedLocale for unknown locales and for catalogues that are
    missing, unreadable or empty.
    """
    if locale not in LOCALES:
        logger.error("[i18n] Invalid locale requested: %s", locale)
        raise UnsupportedLocale(f"Unsupported locale: {locale}")

    path = os.path.join(messages_dir or MESSAGES_DIR, f"{locale}.json")
    try:
        messages = _read_catalogue(path)
    except (OSError, ValueError) as e:
        logger.error('[i18n] Failed to load messages for locale "%s": %s', locale, e)
        raise UnsupportedLocale(f"Messages file is empty or invalid for locale: {locale}")
    if not messages:
        logger.error('[i18n] Messages file is empty for locale "%s"', locale)
        raise UnsupportedLocale(f"Messages file is empty or invalid for locale: {locale}")
    return messages


def translate(locale: str, namespace: str, key: str, **params: Any) -> str:
    """Look up `namespace.key`, falling back to English and then to the key itself."""
    text = None
    for candidate in (locale, FALLBACK_LOCALE):
        try:
            text = load_messages(candidate).get(namespace, {}).get(key)
        except UnsupportedLocale:
            text = None
        if text:
            break
    if not text:
        return f"{namespace}.{key}"
    for name, value in params.items():
        text = text.replace("{" + name + "}", str(value))
    return text


def _parse_accept_language(header: str) -> List[Tuple[str, float]]:
    ranked = []
    for part in header.split(","):
        piece = part.strip()
        if not piece:
            continue
        tag, _, params = piece.partition(";")
        q = 1.0
        params = params.strip()
        if params.startswith("q="):
            try:
                q = float(params[2:])
            except ValueError:
                q = 0.0
        ranked.append((tag.strip().lower().split("-")[0], q))
    ranked.sort(key=lambda kv: kv[1], reverse=True)
    return ranked


def negotiate_locale(requested: Optional[str] = None, accept_language: Optional[str] = None) -> str:
    """Pick a supported locale from an explicit request or an Accept-Language header."""
    if requested:
        tag = requested.strip().lower().split("-")[0]
        if tag in LOCALES:
            return tag
    if accept_language:
        for tag, q in _parse_accept_language(accept_language):
            if q > 0 and tag in LOCALES:
                return tag
    default = get_default_locale()
    return default if default in LOCALES else FALLBACK_LOCALE
