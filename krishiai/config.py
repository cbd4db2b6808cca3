"""Runtime configuration read from the environment (and `.env` via python-dotenv).

Values are looked up on every call so that a reloaded `.env` or a test's
monkeypatched environment takes effect without re-importing modules.
"""
import os
from typing import List

from krishiai.errors import ConfigurationError

FEATURES = ("yield", "disease", "soil")
BACKENDS = ("flow", "remote")

DEFAULT_BACKENDS = {
    "yield": "remote",
    "disease": "flow",
    "soil": "remote",
}

DEFAULT_API_URLS = {
    "yield": "https://mental-hopkins-armor-feb.trycloudflare.com/predict",
    "disease": "https://ministers-dropped-particular-producer.trycloudflare.com/predict_disease",
    "soil": "https://ministers-dropped-particular-producer.trycloudflare.com/predict",
}

DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"
DEFAULT_MAX_UPLOAD_BYTES = 5 * 1024 * 1024


def get_gemini_api_keys() -> List[str]:
    """Return a prioritized list of Gemini API keys.

    Supports either GEMINI_API_KEY (single) or GEMINI_API_KEYS (comma/newline
    separated). Only the first whitespace-delimited token per entry is used so
    trailing comments never leak into requests.
    """
    raw = os.getenv("GEMINI_API_KEYS", "") or os.getenv("GEMINI_API_KEY", "") or ""
    keys: List[str] = []
    for chunk in raw.replace(",", "\n").splitlines():
        token = chunk.strip()
        if not token:
            continue
        keys.append(token.split()[0].strip())
    return keys


def get_gemini_model() -> str:
    return os.getenv("GEMINI_MODEL", DEFAULT_GEMINI_MODEL).strip() or DEFAULT_GEMINI_MODEL


def backend_for(feature: str) -> str:
    """Return "flow" or "remote" for one of the AI features."""
    if feature not in FEATURES:
        raise ConfigurationError(f"Unknown feature: {feature}")
    value = os.getenv(f"{feature.upper()}_BACKEND", DEFAULT_BACKENDS[feature]).strip().lower()
    if value not in BACKENDS:
        raise ConfigurationError(
            f"{feature.upper()}_BACKEND must be one of {', '.join(BACKENDS)}, got {value!r}"
        )
    return value


def api_url_for(feature: str) -> str:
    if feature not in FEATURES:
        raise ConfigurationError(f"Unknown feature: {feature}")
    url = os.getenv(f"{feature.upper()}_API_URL", "").strip() or DEFAULT_API_URLS[feature]
    return url


def get_remote_timeout() -> float:
    raw = os.getenv("REMOTE_TIMEOUT", "30")
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"REMOTE_TIMEOUT must be a number, got {raw!r}")


def get_weather_api_key() -> str:
    return os.getenv("WEATHER_API_KEY", "").strip()


def get_max_upload_bytes() -> int:
    raw = os.getenv("MAX_UPLOAD_BYTES", "")
    if not raw:
        return DEFAULT_MAX_UPLOAD_BYTES
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"MAX_UPLOAD_BYTES must be an integer, got {raw!r}")


def get_default_locale() -> str:
    return os.getenv("DEFAULT_LOCALE", "en").strip() or "en"


def get_log_level() -> str:
    return os.getenv("LOG_LEVEL", "INFO").upper()


def get_cors_origins() -> List[str]:
    raw = os.getenv("CORS_ORIGINS", "*")
    return [o.strip() for o in raw.split(",") if o.strip()] or ["*"]
