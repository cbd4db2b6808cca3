"""Recommends crops based on soil analysis from an image."""
import logging
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from krishiai.config import api_url_for, backend_for
from krishiai.errors import (
    ConfigurationError,
    InvalidDataURI,
    InvalidRemoteResponse,
    PredictionError,
    RemoteAPIError,
)
from krishiai.flows import recommend_crops_flow
from krishiai.schemas import ApiSoilResponse, RecommendCropsInput, RecommendCropsOutput
from krishiai.services.datauri import data_uri_to_upload, preflight_image
from krishiai.services.remote import post_file

logger = logging.getLogger(__name__)


def reshape_soil_response(raw: Any) -> RecommendCropsOutput:
    try:
        parsed = ApiSoilResponse.model_validate(raw)
    except ValidationError as e:
        logger.error("[recommendCrops] API response validation failed: %s", e.errors())
        raise InvalidRemoteResponse(f"Invalid response format from soil recommendation API: {e}")

    crops = [parsed.recommended_crop] if parsed.recommended_crop else []
    return RecommendCropsOutput(soilType=parsed.soil_type, recommendedCrops=crops)


def recommend_crops(data: RecommendCropsInput, client: Optional[httpx.Client] = None,
                    model: Any = None) -> RecommendCropsOutput:
    try:
        content, mime, filename = data_uri_to_upload(data.soilPhotoDataUri, stem="soil_image")
        if backend_for("soil") == "remote":
            logger.info("[recommendCrops] Calling external API for soil-to-crop recommendation.")
            raw = post_file(api_url_for("soil"), filename, content, mime, client=client)
            return reshape_soil_response(raw)

        logger.info("[recommendCrops] Running soil flow.")
        return recommend_crops_flow.run(data, media=preflight_image(content, mime), model=model)
    except (RemoteAPIError, InvalidDataURI, InvalidRemoteResponse, ConfigurationError):
        raise
    except Exception as e:
        logger.error("[recommendCrops] Error calling external API or processing response: %s", e)
        raise PredictionError(f"Failed to get soil recommendations via external API: {e}")
