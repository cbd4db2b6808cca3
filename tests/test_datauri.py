import base64
import os
from io import BytesIO

import pytest
from PIL import Image

from krishiai.errors import InvalidDataURI, UploadRejected
from krishiai.services.datauri import (
    PREFLIGHT_MAX_BYTES,
    bytes_to_data_uri,
    check_image_upload,
    data_uri_to_upload,
    preflight_image,
)

from conftest import png_bytes


def test_png_data_uri_becomes_named_upload():
    raw = png_bytes()
    uri = "data:image/png;base64," + base64.b64encode(raw).decode()
    content, mime, filename = data_uri_to_upload(uri, stem="soil_image")
    assert content == raw
    assert mime == "image/png"
    assert filename == "soil_image.png"


@pytest.mark.parametrize("mime,ext", [
    ("image/jpeg", "jpg"),
    ("image/webp", "webp"),
    ("image/gif", "gif"),
    ("image/bmp", "bin"),
])
def test_extension_follows_mime(mime, ext):
    _, _, filename = data_uri_to_upload(f"data:{mime};base64,AAAA", stem="crop_image")
    assert filename == f"crop_image.{ext}"


@pytest.mark.parametrize("uri", ["data:image/png;base64", "data:image/png;base64,AA,AA"])
def test_uri_without_exactly_one_comma_is_rejected(uri):
    with pytest.raises(InvalidDataURI, match="^Invalid data URI format$"):
        data_uri_to_upload(uri)


@pytest.mark.parametrize("uri", ["data:;base64,AAAA", "garbage,AAAA"])
def test_missing_mime_is_rejected(uri):
    with pytest.raises(InvalidDataURI, match="MIME type not found"):
        data_uri_to_upload(uri)


def test_bad_base64_is_rejected():
    with pytest.raises(InvalidDataURI, match="Invalid base64 data in URI"):
        data_uri_to_upload("data:image/png;base64,@@not-base64@@")


def test_bytes_to_data_uri_is_readable_back():
    raw = png_bytes()
    content, mime, _ = data_uri_to_upload(bytes_to_data_uri(raw, "image/png"))
    assert (content, mime) == (raw, "image/png")


def test_non_image_upload_rejected_in_english():
    with pytest.raises(UploadRejected) as exc:
        check_image_upload("text/plain", 10)
    assert exc.value.status_code == 400
    assert exc.value.message == "Please upload an image file (e.g., JPG, PNG, WEBP)."


def test_non_image_upload_rejected_in_spanish():
    with pytest.raises(UploadRejected) as exc:
        check_image_upload("application/pdf", 10, locale="es")
    assert exc.value.message.startswith("Sube un archivo de imagen")


def test_oversized_upload_rejected(monkeypatch):
    monkeypatch.setenv("MAX_UPLOAD_BYTES", str(2 * 1024 * 1024))
    check_image_upload("image/png", 2 * 1024 * 1024)
    with pytest.raises(UploadRejected) as exc:
        check_image_upload("image/png", 2 * 1024 * 1024 + 1, page="SoilRecommendationPage")
    assert exc.value.status_code == 413
    assert exc.value.message == "Please upload an image smaller than 2MB."


def test_default_upload_limit_is_five_megabytes():
    check_image_upload("image/jpeg", 5 * 1024 * 1024)
    with pytest.raises(UploadRejected):
        check_image_upload("image/jpeg", 5 * 1024 * 1024 + 1)


def test_preflight_leaves_small_images_alone():
    raw = png_bytes()
    assert preflight_image(raw, "image/png") == (raw, "image/png")


def test_preflight_shrinks_wide_images():
    raw = png_bytes(size=(2000, 100))
    out, mime = preflight_image(raw, "image/png")
    assert mime == "image/jpeg"
    with Image.open(BytesIO(out)) as img:
        assert img.size == (1200, 60)


def test_preflight_passes_through_non_images():
    assert preflight_image(b"not an image", "image/png") == (b"not an image", "image/png")


def test_line_wrapped_base64_is_accepted():
    raw = png_bytes()
    encoded = base64.b64encode(raw).decode()
    wrapped = "\n".join(encoded[i:i + 16] for i in range(0, len(encoded), 16))
    content, mime, _ = data_uri_to_upload("data:image/png;base64," + wrapped + "\r\n")
    assert (content, mime) == (raw, "image/png")


def test_preflight_reencodes_heavy_images_within_size_limits():
    noise = Image.frombytes("RGB", (1000, 1000), os.urandom(1000 * 1000 * 3))
    buf = BytesIO()
    noise.save(buf, format="PNG")
    raw = buf.getvalue()
    assert len(raw) > PREFLIGHT_MAX_BYTES

    out, mime = preflight_image(raw, "image/png")
    assert mime == "image/jpeg"
    assert len(out) < len(raw)
    with Image.open(BytesIO(out)) as img:
        assert img.size == (1000, 1000)
