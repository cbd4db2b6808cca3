from krishiai.flows.base import PromptFlow
from krishiai.schemas import PredictCropYieldInput, PredictCropYieldOutput

YIELD_PROMPT = """You are an advanced agricultural AI expert specializing in crop yield prediction.
Based on the following information, predict the crop yield in kilograms per hectare (kg/ha).

Crop Information:
- Crop Type: {cropType}
- Location: {location}
- Planting Date: {plantingDate}
- Season: {season}
- Land Area: {landAreaHectares} hectares

Return ONLY one JSON object with these keys:
- `predictedYieldKgPerHa` (number): the predicted yield in kilograms per hectare.
- `confidenceScore` (number between 0.0 and 1.0): your confidence in the prediction.
- `factorsConsidered` (array of short strings): the key factors you considered.
- `potentialRisks` (array of short strings): risks that could significantly alter the yield.

Consider factors like typical climate for the location and season, general soil knowledge for the region,
common pests or diseases for the crop in that area, and typical yield ranges for the specified crop under normal conditions.
The land area provided might influence factors like management scale or microclimate variations, but the yield prediction should still be per hectare.
Do not ask for more information. Make the best prediction with the given details.
If the location is very general, assume typical conditions for that broader region.
The planting date and season help narrow down the growth cycle and environmental conditions."""

predict_crop_yield_flow = PromptFlow(
    name="predictCropYieldFlow",
    template=YIELD_PROMPT,
    input_schema=PredictCropYieldInput,
    output_schema=PredictCropYieldOutput,
    defaults={"landAreaHectares": "an unspecified number of"},
)
