import logging
import os
from typing import List, Optional

from dotenv import load_dotenv
load_dotenv()

from fastapi import Depends, FastAPI, File, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from krishiai.config import get_cors_origins, get_log_level
from krishiai.errors import KrishiError
from krishiai.i18n import load_messages, negotiate_locale, translate
from krishiai.schemas import (
    MISSING_FIELDS,
    DiagnoseCropDiseaseInput,
    DiagnoseCropDiseaseOutput,
    GovernmentScheme,
    PredictCropYieldInput,
    PredictCropYieldOutput,
    RecommendCropsInput,
    RecommendCropsOutput,
    WeatherData,
    WeatherInput,
)
from krishiai.services.crop_disease import diagnose_crop_disease
from krishiai.services.crop_yield import predict_crop_yield
from krishiai.services.datauri import bytes_to_data_uri, check_image_upload, data_uri_to_upload
from krishiai.services.schemes import get_government_schemes, get_scheme
from krishiai.services.soil_recommendation import recommend_crops
from krishiai.services.weather import get_weather_data

logging.basicConfig(level=get_log_level(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

app = FastAPI(title="KrishiAi+ API", version="0.3.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(KrishiError)
async def krishi_error_handler(request: Request, exc: KrishiError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(content={"error": exc.message}, status_code=exc.status_code)


# validation error type -> (catalogue namespace, key)
LOCALIZED_ERRORS = {
    "missing": ("CropYieldPage", "missingFields"),
    "crop_type_too_short": ("CropYieldPage", "cropTypeMin"),
    "location_too_short": ("CropYieldPage", "locationMin"),
    "planting_date_required": ("CropYieldPage", "plantingDateRequired"),
    "location_required": ("WeatherPage", "enterLocationPrompt"),
}


def _locale_of(request: Request) -> str:
    return negotiate_locale(request.query_params.get("locale"), request.headers.get("accept-language"))


def _validation_response(errors, locale: str = "en") -> JSONResponse:
    details = [{"loc": list(e.get("loc", ())), "msg": e.get("msg"), "type": e.get("type")} for e in errors]
    if any(e.get("type") == "missing" for e in errors):
        first = {"type": "missing", "msg": MISSING_FIELDS}
    else:
        first = errors[0] if errors else {"msg": "Invalid request."}
    if first.get("type") in LOCALIZED_ERRORS:
        message = translate(locale, *LOCALIZED_ERRORS[first["type"]])
    else:
        message = first.get("msg")
    return JSONResponse(content={"error": message, "details": details}, status_code=400)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return _validation_response(exc.errors(), _locale_of(request))


@app.exception_handler(ValidationError)
async def model_validation_handler(request: Request, exc: ValidationError):
    return _validation_response(exc.errors(), _locale_of(request))


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("%s %s failed unexpectedly", request.method, request.url.path)
    return JSONResponse(content={"error": str(exc) or "Internal Server Error"}, status_code=500)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    message = exc.detail
    if exc.status_code == 405:
        message = f"Method {request.method} Not Allowed"
    return JSONResponse(content={"error": message}, status_code=exc.status_code, headers=getattr(exc, "headers", None))


def request_locale(request: Request) -> str:
    return _locale_of(request)


def _read_image_upload(file: UploadFile, locale: str, page: str) -> str:
    content = file.file.read()
    mime = file.content_type or ""
    check_image_upload(mime, len(content), locale=locale, page=page)
    return bytes_to_data_uri(content, mime)


def _check_data_uri_size(data_uri: str, locale: str, page: str) -> None:
    content, mime, _ = data_uri_to_upload(data_uri)
    check_image_upload(mime, len(content), locale=locale, page=page)


@app.get("/healthz")
def healthz():
    return {"status": "ok"}


@app.post("/api/crop-yield", response_model=PredictCropYieldOutput, response_model_exclude_none=True)
def crop_yield(req: PredictCropYieldInput):
    return predict_crop_yield(req)


@app.post("/api/crop-disease", response_model=DiagnoseCropDiseaseOutput, response_model_exclude_none=True)
def crop_disease(req: DiagnoseCropDiseaseInput, locale: str = Depends(request_locale)):
    _check_data_uri_size(req.photoDataUri, locale, "CropDiseasePage")
    return diagnose_crop_disease(req)


@app.post("/api/crop-disease/upload", response_model=DiagnoseCropDiseaseOutput, response_model_exclude_none=True)
def crop_disease_upload(file: UploadFile = File(...), locale: str = Depends(request_locale)):
    data_uri = _read_image_upload(file, locale, "CropDiseasePage")
    logger.info("/api/crop-disease/upload called - filename=%s content_type=%s", file.filename, file.content_type)
    return diagnose_crop_disease(DiagnoseCropDiseaseInput(photoDataUri=data_uri))


@app.post("/api/soil-recommendation", response_model=RecommendCropsOutput)
def soil_recommendation(req: RecommendCropsInput, locale: str = Depends(request_locale)):
    _check_data_uri_size(req.soilPhotoDataUri, locale, "SoilRecommendationPage")
    return recommend_crops(req)


@app.post("/api/soil-recommendation/upload", response_model=RecommendCropsOutput)
def soil_recommendation_upload(file: UploadFile = File(...), locale: str = Depends(request_locale)):
    data_uri = _read_image_upload(file, locale, "SoilRecommendationPage")
    logger.info("/api/soil-recommendation/upload called - filename=%s content_type=%s", file.filename, file.content_type)
    return recommend_crops(RecommendCropsInput(soilPhotoDataUri=data_uri))


@app.get("/api/weather", response_model=WeatherData, response_model_exclude_none=True)
def weather(location: str = ""):
    return get_weather_data(WeatherInput(location=location))


@app.get("/api/government-schemes", response_model=List[GovernmentScheme])
def government_schemes(query: Optional[str] = None):
    return get_government_schemes(query)


@app.get("/api/government-schemes/{scheme_id}", response_model=GovernmentScheme)
def government_scheme(scheme_id: str):
    return get_scheme(scheme_id)


@app.get("/api/messages/{locale}")
def messages(locale: str):
    return load_messages(locale)


def run():
    import uvicorn

    uvicorn.run("krishiai.main:app", host=os.getenv("HOST", "0.0.0.0"), port=int(os.getenv("PORT", "8000")))
