"""Crop yield prediction, served by the remote yield model or the Gemini flow."""
import logging
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from krishiai.config import api_url_for, backend_for
from krishiai.errors import ConfigurationError, InvalidRemoteResponse, PredictionError, RemoteAPIError
from krishiai.flows import predict_crop_yield_flow
from krishiai.schemas import PredictCropYieldInput, PredictCropYieldOutput
from krishiai.services.remote import post_json

logger = logging.getLogger(__name__)

# Older model deployments answered with one of these instead of predictedYieldKgPerHa.
YIELD_KEYS = ("predictedYieldKgPerHa", "predicted_yield_kg_per_ha", "predictedYieldKg", "predicted_yield", "prediction")


def _first(raw: dict, *keys: str) -> Any:
    for key in keys:
        if raw.get(key) is not None:
            return raw[key]
    return None


def reshape_yield_response(raw: Any) -> PredictCropYieldOutput:
    """Map the remote model's JSON onto PredictCropYieldOutput."""
    if not isinstance(raw, dict):
        raise InvalidRemoteResponse(f"Invalid response format from crop yield API: expected an object, got {type(raw).__name__}")

    value = _first(raw, *YIELD_KEYS)
    if isinstance(value, list) and value:
        value = value[0]
    if value is None:
        raise InvalidRemoteResponse("Invalid response format from crop yield API: no predicted yield in response")

    try:
        return PredictCropYieldOutput(
            predictedYieldKgPerHa=value,
            confidenceScore=_first(raw, "confidenceScore", "confidence_score", "confidence"),
            factorsConsidered=_first(raw, "factorsConsidered", "factors_considered", "factors"),
            potentialRisks=_first(raw, "potentialRisks", "potential_risks", "risks"),
        )
    except ValidationError as e:
        raise InvalidRemoteResponse(f"Invalid response format from crop yield API: {e}")


def predict_crop_yield(data: PredictCropYieldInput, client: Optional[httpx.Client] = None,
                       model: Any = None) -> PredictCropYieldOutput:
    """Predict yield in kg/ha for the given crop details.

    Remote status failures and configuration problems are raised unchanged;
    any other failure is wrapped in PredictionError.
    """
    logger.info("[predictCropYield] Requesting yield prediction for: %s", data.to_payload())
    try:
        if backend_for("yield") == "remote":
            raw = post_json(api_url_for("yield"), data.to_payload(), client=client)
            result = reshape_yield_response(raw)
        else:
            result = predict_crop_yield_flow.run(data, model=model)
    except (RemoteAPIError, ConfigurationError):
        raise
    except Exception as e:
        logger.error("[predictCropYield] Error getting prediction: %s", e)
        raise PredictionError(
            "Failed to get crop yield prediction from the external service. Please try again. "
            f"Details: {e}"
        )

    if result.predictedYieldKgPerHa < 0:
        logger.warning(
            "[predictCropYield] Predicted yield for %s at %s is negative: %s kg/ha. "
            "This may indicate very unfavorable conditions or a prediction anomaly.",
            data.cropType, data.location, result.predictedYieldKgPerHa,
        )

    if data.landAreaHectares is not None:
        result.totalYieldKg = round(result.predictedYieldKgPerHa * data.landAreaHectares, 2)

    logger.info("[predictCropYield] Result: %s", result.model_dump())
    return result
