"""Request/response models for every KrishiAi+ tool.

Field names follow the JSON wire format the web client uses (camelCase).
"""
from datetime import date
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_core import PydanticCustomError


MISSING_FIELDS = "Missing required fields in request body."
REQUIRED_YIELD_FIELDS = ("cropType", "location", "plantingDate", "season")


class PredictCropYieldInput(BaseModel):
    cropType: str = Field(..., description="The type of crop (e.g., Wheat, Corn, Rice).")
    location: str = Field(..., description="The geographical location (e.g., Central Valley, CA, Punjab, India).")
    plantingDate: date = Field(..., description="The date the crop was planted, in 'yyyy-MM-dd' format.")
    season: str = Field(..., description="The agricultural season (e.g., Kharif, Rabi, Zaid, Whole Year).")
    landAreaHectares: Optional[float] = Field(None, description="The area of the land in hectares (e.g., 2.5).")

    @model_validator(mode="before")
    @classmethod
    def _required_fields_present(cls, data: Any) -> Any:
        # null and "" count as absent, like an omitted key
        if isinstance(data, dict):
            for name in REQUIRED_YIELD_FIELDS:
                if data.get(name) is None or data.get(name) == "":
                    raise PydanticCustomError("missing", MISSING_FIELDS)
        return data

    @field_validator("cropType")
    @classmethod
    def _crop_type_length(cls, v: str) -> str:
        if len(v.strip()) < 2:
            raise PydanticCustomError("crop_type_too_short", "Crop type must be at least 2 characters.")
        return v.strip()

    @field_validator("location")
    @classmethod
    def _location_length(cls, v: str) -> str:
        if len(v.strip()) < 3:
            raise PydanticCustomError("location_too_short", "Location must be at least 3 characters.")
        return v.strip()

    @field_validator("plantingDate", mode="before")
    @classmethod
    def _planting_date_present(cls, v: Any) -> Any:
        if v is None or (isinstance(v, str) and not v.strip()):
            raise PydanticCustomError("planting_date_required", "Planting date is required.")
        return v

    @field_validator("season")
    @classmethod
    def _season_present(cls, v: str) -> str:
        if not v.strip():
            raise PydanticCustomError("season_required", "Season is required.")
        return v.strip()

    @field_validator("landAreaHectares")
    @classmethod
    def _land_area_minimum(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and v < 0.01:
            raise PydanticCustomError("land_area_too_small", "Land area must be at least 0.01 hectares.")
        return v

    def to_payload(self) -> Dict[str, Any]:
        """JSON body for the remote yield model (date as yyyy-MM-dd)."""
        return self.model_dump(mode="json", exclude_none=True)


class PredictCropYieldOutput(BaseModel):
    predictedYieldKgPerHa: float
    confidenceScore: Optional[float] = Field(None, ge=0, le=1)
    factorsConsidered: Optional[List[str]] = None
    potentialRisks: Optional[List[str]] = None
    totalYieldKg: Optional[float] = None


class DiagnoseCropDiseaseInput(BaseModel):
    photoDataUri: str = Field(
        ...,
        description="A photo of a crop, as a data URI that must include a MIME type and use Base64 encoding. "
        "Expected format: 'data:<mimetype>;base64,<encoded_data>'.",
    )

    @field_validator("photoDataUri")
    @classmethod
    def _must_be_image(cls, v: str) -> str:
        if not v.startswith("data:image/"):
            raise PydanticCustomError("invalid_image_data", "Invalid image data format.")
        return v


class DiagnosisFlowOutput(BaseModel):
    """Shape the generative model is asked to produce."""

    isPlant: bool = Field(..., description="Whether or not the input is a plant.")
    hasDisease: bool = Field(..., description="Whether or not the plant has a disease.")
    diseaseName: Optional[str] = Field(None, description="The name of the disease, if any.")
    treatmentRecommendations: Optional[str] = Field(None, description="Treatment recommendations for the disease, if any.")


class DiagnoseCropDiseaseOutput(BaseModel):
    source: str
    isPlant: Optional[bool] = None
    hasDisease: Optional[bool] = None
    diseaseName: Optional[str] = None
    treatmentRecommendations: Optional[str] = None
    predictedClass: Optional[str] = None
    confidence: Optional[float] = None
    api_response: Optional[Any] = None
    processingError: Optional[str] = None


class RecommendCropsInput(BaseModel):
    soilPhotoDataUri: str = Field(
        ...,
        description="A photo of the soil, as a data URI that must include a MIME type and use Base64 encoding. "
        "Expected format: 'data:<mimetype>;base64,<encoded_data>'.",
    )

    @field_validator("soilPhotoDataUri")
    @classmethod
    def _must_be_image(cls, v: str) -> str:
        if not v.startswith("data:image/"):
            raise PydanticCustomError("invalid_image_data", "Invalid image data format.")
        return v


class ApiSoilResponse(BaseModel):
    soil_type: str = Field(..., description="The type of soil detected by the API.")
    recommended_crop: Optional[str] = Field(None, description="The single crop recommended by the API for the detected soil type.")


class RecommendCropsOutput(BaseModel):
    soilType: str = Field(..., description="The type of soil detected in the image.")
    recommendedCrops: List[str] = Field(default_factory=list, description="A list of crops recommended for the detected soil type.")


class WeatherInput(BaseModel):
    location: str

    @field_validator("location")
    @classmethod
    def _location_present(cls, v: str) -> str:
        if not v.strip():
            raise PydanticCustomError("location_required", "Please enter a location to see the weather forecast.")
        return v.strip()


class DailyForecast(BaseModel):
    day: str
    tempMin: Optional[float] = None
    tempMax: Optional[float] = None
    precipitationProbability: Optional[float] = None
    precipitationMm: Optional[float] = None
    condition: Optional[str] = None


class WeatherData(BaseModel):
    locationName: str
    temperature: float
    feelsLike: float
    condition: str
    iconUrl: Optional[str] = None
    humidity: float
    windSpeed: float
    pressure: float
    uvIndex: Optional[float] = None
    visibility: Optional[float] = None
    sunrise: Optional[str] = None
    sunset: Optional[str] = None
    source: Optional[str] = None
    daily: List[DailyForecast] = Field(default_factory=list)
    advisories: List[str] = Field(default_factory=list)


class GovernmentScheme(BaseModel):
    id: str
    title: str
    description: str
    eligibility: str
    benefits: List[str]
    link: str
