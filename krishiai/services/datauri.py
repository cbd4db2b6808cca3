"""Conversions between data URIs, uploaded files and the bytes sent to model services."""
import base64
import binascii
import logging
from io import BytesIO
from typing import Tuple

from PIL import Image

from krishiai.config import get_max_upload_bytes
from krishiai.errors import InvalidDataURI, UploadRejected
from krishiai.i18n import translate

logger = logging.getLogger(__name__)

EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
    "image/gif": "gif",
}

# Inline images above these limits are re-encoded before going to Gemini.
PREFLIGHT_MAX_BYTES = 700_000
PREFLIGHT_MAX_DIM = 1400
PREFLIGHT_TARGET_DIM = 1200


def data_uri_to_upload(data_uri: str, stem: str = "upload") -> Tuple[bytes, str, str]:
    """Split a `data:<mime>;base64,<payload>` URI into (content, mime, filename)."""
    parts = data_uri.split(",")
    if len(parts) != 2:
        raise InvalidDataURI("Invalid data URI format")
    meta, data = parts

    _, sep, rest = meta.partition(":")
    mime = rest.split(";")[0].strip() if sep else ""
    if not mime:
        raise InvalidDataURI("Invalid data URI format: MIME type not found")

    try:
        # base64 wrapped at line breaks is accepted
        content = base64.b64decode("".join(data.split()), validate=True)
    except (binascii.Error, ValueError):
        raise InvalidDataURI("Invalid base64 data in URI")

    extension = EXTENSIONS.get(mime, "bin")
    return content, mime, f"{stem}.{extension}"


def bytes_to_data_uri(content: bytes, mime: str) -> str:
    return f"data:{mime};base64,{base64.b64encode(content).decode('ascii')}"


def check_image_upload(mime: str, size: int, locale: str = "en", page: str = "CropDiseasePage") -> None:
    """Reject non-image uploads and uploads over MAX_UPLOAD_BYTES."""
    if not (mime or "").startswith("image/"):
        raise UploadRejected(translate(locale, page, "invalidFileTypeErrorDescription"))
    max_bytes = get_max_upload_bytes()
    if size > max_bytes:
        max_mb = max_bytes // (1024 * 1024) or 1
        raise UploadRejected(translate(locale, page, "fileTooLargeErrorDescription", maxMb=max_mb), status_code=413)


def preflight_image(content: bytes, mime: str) -> Tuple[bytes, str]:
    """Shrink large images so inline model requests stay small.

    Images Pillow cannot open are passed through untouched.
    """
    need_reencode = len(content) > PREFLIGHT_MAX_BYTES
    if not need_reencode:
        try:
            with Image.open(BytesIO(content)) as img:
                w, h = img.size
                need_reencode = max(w, h) > PREFLIGHT_MAX_DIM
        except Exception:
            return content, mime

    if not need_reencode:
        return content, mime

    try:
        with Image.open(BytesIO(content)) as img_obj:
            img_obj = img_obj.convert("RGB")
            w, h = img_obj.size
            if max(w, h) > PREFLIGHT_TARGET_DIM:
                scale = PREFLIGHT_TARGET_DIM / float(max(w, h))
                img_obj = img_obj.resize((int(w * scale), int(h * scale)), Image.LANCZOS)
            out = BytesIO()
            img_obj.save(out, format="JPEG", quality=75, optimize=True)
    except Exception as e:
        logger.warning("[Upload] Failed to re-encode image for preflight: %s", e)
        return content, mime

    out_bytes = out.getvalue()
    logger.info("[Upload] Re-encoded image: %d -> %d bytes, %dx%d", len(content), len(out_bytes), *img_obj.size)
    return out_bytes, "image/jpeg"
