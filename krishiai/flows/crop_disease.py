from krishiai.flows.base import PromptFlow
from krishiai.schemas import DiagnoseCropDiseaseInput, DiagnosisFlowOutput

DIAGNOSIS_PROMPT = """You are an expert in diagnosing crop diseases. Analyze the attached image and determine if it is a plant,
whether it has a disease, and suggest treatments if necessary.

Return ONLY one JSON object with these keys:
- `isPlant` (bool): whether or not the image shows a plant.
- `hasDisease` (bool): whether or not the plant has a disease.
- `diseaseName` (string, omit when healthy): the name of the disease.
- `treatmentRecommendations` (string, omit when healthy): short, actionable treatment advice for a farmer.

If the image is not a plant, set `isPlant` and `hasDisease` to false."""

diagnose_crop_disease_flow = PromptFlow(
    name="diagnoseCropDiseaseFlow",
    template=DIAGNOSIS_PROMPT,
    input_schema=DiagnoseCropDiseaseInput,
    output_schema=DiagnosisFlowOutput,
)
