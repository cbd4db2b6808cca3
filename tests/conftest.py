import base64
import json
from io import BytesIO

import httpx
import pytest
from PIL import Image

ENV_VARS = [
    "GEMINI_API_KEY",
    "GEMINI_API_KEYS",
    "GEMINI_MODEL",
    "YIELD_BACKEND",
    "DISEASE_BACKEND",
    "SOIL_BACKEND",
    "YIELD_API_URL",
    "DISEASE_API_URL",
    "SOIL_API_URL",
    "REMOTE_TIMEOUT",
    "WEATHER_API_KEY",
    "MAX_UPLOAD_BYTES",
    "DEFAULT_LOCALE",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def png_bytes(size=(8, 8), color=(90, 60, 30)) -> bytes:
    out = BytesIO()
    Image.new("RGB", size, color).save(out, format="PNG")
    return out.getvalue()


def png_data_uri(size=(8, 8)) -> str:
    return "data:image/png;base64," + base64.b64encode(png_bytes(size)).decode("ascii")


class FakeModel:
    """Stands in for GeminiModel; records what it was asked."""

    def __init__(self, reply):
        self.reply = reply
        self.calls = []

    def generate(self, prompt, media=None):
        self.calls.append({"prompt": prompt, "media": media})
        if isinstance(self.reply, (dict, list)):
            return json.dumps(self.reply)
        return self.reply


def mock_client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


@pytest.fixture
def sample_png_uri():
    return png_data_uri()
