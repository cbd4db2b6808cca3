from krishiai.flows.base import PromptFlow
from krishiai.schemas import RecommendCropsInput, RecommendCropsOutput

SOIL_PROMPT = """You are a soil science expert advising small farmers. Look at the attached photo of soil,
identify the soil type (for example Alluvial, Black, Red, Laterite, Arid, Clay, Loamy or Sandy soil) and recommend crops
that grow well in it.

Return ONLY one JSON object with these keys:
- `soilType` (string): the detected soil type.
- `recommendedCrops` (array of strings): up to five crops suited to this soil, best first.

Judge from the soil only. If the photo does not show soil, set `soilType` to "Unknown" and `recommendedCrops` to []."""

recommend_crops_flow = PromptFlow(
    name="recommendCropsFlow",
    template=SOIL_PROMPT,
    input_schema=RecommendCropsInput,
    output_schema=RecommendCropsOutput,
)
