"""HTTP client for the external model endpoints (yield, disease, soil).

Each call makes exactly one request. A caller may pass its own
`httpx.Client`; otherwise a short-lived client is opened per call.
"""
import json
import logging
from typing import Any, Dict, Optional

import httpx

from krishiai.config import get_remote_timeout
from krishiai.errors import InvalidRemoteResponse, RemoteAPIError

logger = logging.getLogger(__name__)

UPLOAD_FIELD = "file"


def _error_body(response: httpx.Response) -> str:
    try:
        return json.dumps(response.json())
    except ValueError:
        pass
    try:
        return response.text
    except Exception:
        logger.warning("[Remote] Could not read error body as JSON or text.")
        return ""


def _handle(response: httpx.Response, url: str) -> Any:
    if not response.is_success:
        body = _error_body(response)
        logger.error("[Remote] %s failed: %s %s %s", url, response.status_code, response.reason_phrase, body[:300])
        raise RemoteAPIError(
            f"API request failed with status {response.status_code}: {body or response.reason_phrase}",
            status=response.status_code,
            body=body,
        )
    try:
        data = response.json()
    except ValueError:
        raise InvalidRemoteResponse(f"Response from {url} is not valid JSON: {response.text[:200]}")
    logger.info("[Remote] %s response received: %s", url, str(data)[:300])
    return data


def _send(method_kwargs: Dict[str, Any], url: str, client: Optional[httpx.Client]) -> Any:
    if client is not None:
        return _handle(client.post(url, **method_kwargs), url)
    # Tunnel URLs must not inherit proxy settings
    with httpx.Client(timeout=get_remote_timeout(), trust_env=False) as own_client:
        return _handle(own_client.post(url, **method_kwargs), url)


def post_json(url: str, payload: Dict[str, Any], client: Optional[httpx.Client] = None) -> Any:
    """POST a JSON body and return the decoded JSON response."""
    logger.info("[Remote] POST %s (json)", url)
    return _send({"json": payload}, url, client)


def post_file(url: str, filename: str, content: bytes, mime: str, client: Optional[httpx.Client] = None,
              field: str = UPLOAD_FIELD) -> Any:
    """POST one file as multipart/form-data under `field`."""
    logger.info("[Remote] POST %s (multipart %s=%s, %d bytes)", url, field, filename, len(content))
    return _send({"files": {field: (filename, content, mime)}}, url, client)
