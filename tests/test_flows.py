import types

import pytest

from krishiai.errors import ConfigurationError, FlowError
from krishiai.flows import (
    GeminiModel,
    diagnose_crop_disease_flow,
    extract_first_json_object,
    predict_crop_yield_flow,
    recommend_crops_flow,
)
from krishiai.flows import base as flow_base
from krishiai.schemas import PredictCropYieldInput, RecommendCropsInput

from conftest import FakeModel, png_data_uri

YIELD_INPUT = PredictCropYieldInput(
    cropType="Wheat", location="Punjab, India", plantingDate="2024-11-10", season="Rabi", landAreaHectares=2.5,
)


def test_extract_json_strips_code_fences():
    assert extract_first_json_object('```json\n{"a": 1}\n```') == {"a": 1}


def test_extract_json_ignores_trailing_prose():
    text = 'Here you go: {"soilType": "Black {clay}", "recommendedCrops": ["Cotton"]} Hope this helps!'
    assert extract_first_json_object(text) == {"soilType": "Black {clay}", "recommendedCrops": ["Cotton"]}


def test_extract_json_without_object_fails():
    with pytest.raises(ValueError):
        extract_first_json_object("I cannot help with that.")


def test_yield_prompt_is_rendered_from_input():
    model = FakeModel({"predictedYieldKgPerHa": 4100, "confidenceScore": 0.7})
    out = predict_crop_yield_flow.run(YIELD_INPUT, model=model)
    assert out.predictedYieldKgPerHa == 4100
    prompt = model.calls[0]["prompt"]
    assert "- Crop Type: Wheat" in prompt
    assert "- Planting Date: 2024-11-10" in prompt
    assert "- Land Area: 2.5 hectares" in prompt
    assert model.calls[0]["media"] is None


def test_yield_prompt_without_land_area():
    values = YIELD_INPUT.model_copy(update={"landAreaHectares": None})
    model = FakeModel({"predictedYieldKgPerHa": 4100})
    predict_crop_yield_flow.run(values, model=model)
    assert "- Land Area: an unspecified number of hectares" in model.calls[0]["prompt"]


def test_flow_accepts_plain_dict_input():
    model = FakeModel({"soilType": "Red Soil", "recommendedCrops": ["Groundnut", "Millets"]})
    out = recommend_crops_flow.run({"soilPhotoDataUri": png_data_uri()}, media=(b"x", "image/png"), model=model)
    assert out.soilType == "Red Soil"
    assert out.recommendedCrops == ["Groundnut", "Millets"]
    assert model.calls[0]["media"] == (b"x", "image/png")


def test_empty_output_is_a_flow_error():
    with pytest.raises(FlowError, match="predictCropYieldFlow failed to return an output."):
        predict_crop_yield_flow.run(YIELD_INPUT, model=FakeModel("   "))


def test_output_not_matching_schema_is_a_flow_error():
    with pytest.raises(FlowError, match="unexpected format"):
        diagnose_crop_disease_flow.run(
            {"photoDataUri": png_data_uri()}, media=(b"x", "image/png"), model=FakeModel({"isPlant": "maybe"}),
        )


def test_non_json_output_is_a_flow_error():
    with pytest.raises(FlowError, match="not JSON"):
        recommend_crops_flow.run(RecommendCropsInput(soilPhotoDataUri=png_data_uri()), model=FakeModel("no idea"))


def test_gemini_requires_a_key():
    with pytest.raises(ConfigurationError, match="GEMINI_API_KEY not configured"):
        GeminiModel().generate("hello")


def _fake_genai(configured):
    state = {}

    def configure(api_key):
        configured.append(api_key)
        state["key"] = api_key

    class GenerativeModel:
        def __init__(self, name, generation_config=None):
            self.name = name
            self.generation_config = generation_config

        def generate_content(self, parts):
            if state["key"] == "bad-key":
                raise RuntimeError("API key not valid")
            return types.SimpleNamespace(text='{"ok": true}', parts=parts)

    return types.SimpleNamespace(configure=configure, GenerativeModel=GenerativeModel)


def test_gemini_rotates_to_next_key(monkeypatch):
    configured = []
    monkeypatch.setattr(flow_base, "genai", _fake_genai(configured))
    monkeypatch.setenv("GEMINI_API_KEYS", "bad-key  # expired\ngood-key")
    assert GeminiModel().generate("prompt", media=(b"img", "image/jpeg")) == '{"ok": true}'
    assert configured == ["bad-key", "good-key"]


def test_gemini_all_keys_failing(monkeypatch):
    monkeypatch.setattr(flow_base, "genai", _fake_genai([]))
    monkeypatch.setenv("GEMINI_API_KEY", "bad-key")
    with pytest.raises(FlowError, match="API key not valid"):
        GeminiModel().generate("prompt")
