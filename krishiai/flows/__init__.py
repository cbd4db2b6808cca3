"""
Prompt-based AI flows backed by Gemini.

Exports:
- predict_crop_yield_flow: yield in kg/ha from crop, place, date and season
- diagnose_crop_disease_flow: plant/disease check from a crop photo
- recommend_crops_flow: soil type and suitable crops from a soil photo
"""
from .base import GeminiModel, PromptFlow, extract_first_json_object
from .crop_disease import diagnose_crop_disease_flow
from .crop_yield import predict_crop_yield_flow
from .soil_recommendation import recommend_crops_flow

__all__ = [
    'GeminiModel',
    'PromptFlow',
    'extract_first_json_object',
    'predict_crop_yield_flow',
    'diagnose_crop_disease_flow',
    'recommend_crops_flow',
]
