# KrishiAi+
"""
AI-assisted tools for farmers.

Services:
- crop_yield: yield prediction (remote model or Gemini flow)
- crop_disease: disease diagnosis from a crop photo
- soil_recommendation: crop recommendation from a soil photo
- weather: current conditions, forecast and field advisories
- schemes: government scheme catalogue
"""
__version__ = "0.3.0"
