"""Crop disease diagnosis from a photo."""
import logging
from typing import Any, Optional

import httpx

from krishiai.config import api_url_for, backend_for
from krishiai.errors import KrishiError, PredictionError
from krishiai.flows import diagnose_crop_disease_flow
from krishiai.schemas import DiagnoseCropDiseaseInput, DiagnoseCropDiseaseOutput
from krishiai.services.datauri import data_uri_to_upload, preflight_image
from krishiai.services.remote import post_file

logger = logging.getLogger(__name__)

PROCESSING_ERROR = "Could not process the API response. The format might be unexpected."
HEALTHY_MARKERS = ("healthy",)


def reshape_disease_response(raw: Any) -> DiagnoseCropDiseaseOutput:
    """Turn `{predicted_class, confidence}` from the classifier into a display result.

    Malformed responses are not an error: the raw payload is kept and
    `processingError` explains why nothing could be shown.
    """
    result = DiagnoseCropDiseaseOutput(source="remote", api_response=raw)
    if not isinstance(raw, dict):
        logger.warning("[diagnoseCropDisease] API response is not in the expected object format: %s", raw)
        result.processingError = PROCESSING_ERROR
        return result

    confidence = raw.get("confidence")
    predicted = raw.get("predicted_class")
    if isinstance(confidence, (int, float)) and not isinstance(confidence, bool):
        result.confidence = round(float(confidence), 2)
    if isinstance(predicted, str):
        result.predictedClass = predicted.replace("_", " ")

    if result.confidence is None or result.predictedClass is None:
        logger.warning("[diagnoseCropDisease] API response is missing 'confidence' or 'predicted_class': %s", raw)
        result.processingError = PROCESSING_ERROR
        return result

    healthy = any(marker in result.predictedClass.lower() for marker in HEALTHY_MARKERS)
    result.hasDisease = not healthy
    result.diseaseName = None if healthy else result.predictedClass
    return result


def diagnose_crop_disease(data: DiagnoseCropDiseaseInput, client: Optional[httpx.Client] = None,
                          model: Any = None) -> DiagnoseCropDiseaseOutput:
    content, mime, filename = data_uri_to_upload(data.photoDataUri, stem="crop_image")
    try:
        if backend_for("disease") == "remote":
            logger.info("[diagnoseCropDisease] Calling external API with %s", filename)
            raw = post_file(api_url_for("disease"), filename, content, mime, client=client)
            return reshape_disease_response(raw)

        media = preflight_image(content, mime)
        output = diagnose_crop_disease_flow.run(data, media=media, model=model)
        return DiagnoseCropDiseaseOutput(source="flow", **output.model_dump())
    except KrishiError:
        raise
    except Exception as e:
        logger.exception("[diagnoseCropDisease] Unexpected failure")
        raise PredictionError(f"Failed to diagnose crop disease: {e}")
