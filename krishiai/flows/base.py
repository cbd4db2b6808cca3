"""Prompt flows: render a prompt, call Gemini, validate the JSON it returns."""
import json
import logging
from typing import Any, Dict, Optional, Tuple, Type

import google.generativeai as genai
from pydantic import BaseModel, ValidationError

from krishiai.config import get_gemini_api_keys, get_gemini_model
from krishiai.errors import ConfigurationError, FlowError

logger = logging.getLogger(__name__)

# (content, mime) of an inline image
Media = Tuple[bytes, str]


def extract_first_json_object(content: str) -> Dict[str, Any]:
    """Extract and parse the first JSON object from a text blob.

    Handles replies that wrap the object in Markdown code fences or follow it
    with extra prose.
    """
    txt = (content or "").strip()
    if txt.startswith("```json"):
        txt = txt[7:]
    if txt.startswith("```"):
        txt = txt[3:]
    if txt.endswith("```"):
        txt = txt[:-3]
    txt = txt.strip()

    try:
        return json.loads(txt)
    except ValueError:
        pass

    start = txt.find("{")
    if start == -1:
        raise ValueError("No JSON object start found")
    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(txt)):
        ch = txt[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return json.loads(txt[start:i + 1])
    raise ValueError("No complete JSON object found")


class GeminiModel:
    """Thin wrapper over `google.generativeai` that rotates through configured keys."""

    def __init__(self, model_name: Optional[str] = None):
        self.model_name = model_name or get_gemini_model()

    def generate(self, prompt: str, media: Optional[Media] = None) -> str:
        api_keys = get_gemini_api_keys()
        if not api_keys:
            raise ConfigurationError("GEMINI_API_KEY not configured")

        parts: list = [prompt]
        if media is not None:
            content, mime = media
            parts.append({"mime_type": mime, "data": content})

        last_error: Optional[Exception] = None
        for idx, key in enumerate(api_keys):
            try:
                genai.configure(api_key=key)
                model = genai.GenerativeModel(
                    self.model_name,
                    generation_config={"response_mime_type": "application/json"},
                )
                response = model.generate_content(parts)
                return response.text
            except Exception as e:
                logger.warning("[Gemini] key #%d failed: %s", idx + 1, e)
                last_error = e
        raise FlowError(f"Gemini call failed: {last_error}")


class PromptFlow:
    def __init__(self, name: str, template: str, input_schema: Type[BaseModel],
                 output_schema: Type[BaseModel], model: Any = None,
                 defaults: Optional[Dict[str, Any]] = None):
        self.name = name
        self.template = template
        self.input_schema = input_schema
        self.output_schema = output_schema
        self.model = model
        # substituted for fields the caller left empty
        self.defaults = defaults or {}

    def render(self, values: BaseModel) -> str:
        data = values.model_dump(mode="json")
        for key, fallback in self.defaults.items():
            if data.get(key) is None:
                data[key] = fallback
        return self.template.format(**data)

    def run(self, values: BaseModel, media: Optional[Media] = None, model: Any = None) -> BaseModel:
        if not isinstance(values, self.input_schema):
            values = self.input_schema.model_validate(values)
        model = model or self.model or GeminiModel()
        prompt = self.render(values)

        logger.info("[%s] running (media=%s)", self.name, media[1] if media else None)
        text = model.generate(prompt, media)
        if not text or not text.strip():
            raise FlowError(f"{self.name} failed to return an output.")

        try:
            data = extract_first_json_object(text)
        except ValueError as e:
            logger.error("[%s] unparseable output: %s", self.name, text[:300])
            raise FlowError(f"{self.name} returned output that is not JSON: {e}")

        try:
            return self.output_schema.model_validate(data)
        except ValidationError as e:
            logger.error("[%s] output failed validation: %s", self.name, e)
            raise FlowError(f"{self.name} returned output in an unexpected format: {e}")
