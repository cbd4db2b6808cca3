"""Current weather and a short forecast for a free-text location.

Places are geocoded with Open-Meteo. Current conditions come from OpenWeather
when WEATHER_API_KEY is set and from Open-Meteo otherwise (or when OpenWeather
fails). The daily forecast always comes from Open-Meteo, which needs no key.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httpx

from krishiai.config import get_weather_api_key
from krishiai.errors import LocationNotFound, WeatherUnavailable
from krishiai.schemas import DailyForecast, WeatherData, WeatherInput

logger = logging.getLogger(__name__)

GEOCODING_URL = "https://geocoding-api.open-meteo.com/v1/search"
OPEN_METEO_URL = "https://api.open-meteo.com/v1/forecast"
OWM_CURRENT_URL = "https://api.openweathermap.org/data/2.5/weather"
OWM_ICON_URL = "https://openweathermap.org/img/wn/{icon}@2x.png"

FORECAST_DAYS = 7
THUNDERSTORM_CODES = {95, 96, 99}

# WMO weather interpretation codes used by Open-Meteo
WMO_CONDITIONS = {
    0: "Clear sky",
    1: "Mainly clear",
    2: "Partly cloudy",
    3: "Overcast",
    45: "Fog",
    48: "Depositing rime fog",
    51: "Light drizzle",
    53: "Moderate drizzle",
    55: "Dense drizzle",
    56: "Light freezing drizzle",
    57: "Dense freezing drizzle",
    61: "Slight rain",
    63: "Moderate rain",
    65: "Heavy rain",
    66: "Light freezing rain",
    67: "Heavy freezing rain",
    71: "Slight snow fall",
    73: "Moderate snow fall",
    75: "Heavy snow fall",
    77: "Snow grains",
    80: "Slight rain showers",
    81: "Moderate rain showers",
    82: "Violent rain showers",
    85: "Slight snow showers",
    86: "Heavy snow showers",
    95: "Thunderstorm",
    96: "Thunderstorm with slight hail",
    99: "Thunderstorm with heavy hail",
}


def _get(client: Optional[httpx.Client], url: str, params: Dict[str, Any]) -> Dict[str, Any]:
    if client is not None:
        resp = client.get(url, params=params)
        resp.raise_for_status()
        return resp.json()
    with httpx.Client(timeout=20.0) as own_client:
        resp = own_client.get(url, params=params)
        resp.raise_for_status()
        return resp.json()


def geocode(location: str, client: Optional[httpx.Client] = None) -> Dict[str, Any]:
    """Resolve "Pune", "Pune, IN" or a postal code to coordinates."""
    name, _, qualifier = location.partition(",")
    params: Dict[str, Any] = {"name": name.strip(), "count": 1, "language": "en", "format": "json"}
    qualifier = qualifier.strip()
    if len(qualifier) == 2 and qualifier.isalpha():
        params["countryCode"] = qualifier.upper()

    try:
        data = _get(client, GEOCODING_URL, params)
    except (httpx.HTTPError, ValueError) as e:
        # ValueError covers 200 responses whose body is not JSON
        raise WeatherUnavailable(f"Geocoding failed for {location!r}: {e}")

    results = (data.get("results") if isinstance(data, dict) else None) or []
    if not results:
        raise LocationNotFound(f"Could not find a place called {location}.")
    place = results[0]
    try:
        return {
            "name": place.get("name") or name.strip(),
            "lat": float(place["latitude"]),
            "lon": float(place["longitude"]),
            "country": place.get("country"),
            "admin1": place.get("admin1"),
        }
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise WeatherUnavailable(f"Geocoding returned an unusable result for {location!r}: {e}")


def fetch_open_meteo(lat: float, lon: float, client: Optional[httpx.Client] = None,
                     days: int = FORECAST_DAYS) -> Dict[str, Any]:
    params = {
        "latitude": lat,
        "longitude": lon,
        "current": "temperature_2m,apparent_temperature,relative_humidity_2m,weather_code,"
                   "wind_speed_10m,pressure_msl,visibility,uv_index",
        "daily": "weather_code,temperature_2m_max,temperature_2m_min,precipitation_sum,"
                 "precipitation_probability_max,sunrise,sunset",
        "timezone": "auto",
        "forecast_days": days,
    }
    return _get(client, OPEN_METEO_URL, params)


def fetch_openweather_current(lat: float, lon: float, api_key: str,
                              client: Optional[httpx.Client] = None) -> Dict[str, Any]:
    params = {"lat": lat, "lon": lon, "units": "metric", "appid": api_key}
    return _get(client, OWM_CURRENT_URL, params)


def _iso_from_unix(ts: Optional[int]) -> Optional[str]:
    if ts is None:
        return None
    return datetime.fromtimestamp(ts, tz=timezone.utc).isoformat()


def _at(values: List[Any], i: int) -> Any:
    return values[i] if i < len(values) else None


def current_from_openweather(raw: Dict[str, Any]) -> Dict[str, Any]:
    main = raw.get("main") or {}
    wind = raw.get("wind") or {}
    weather = (raw.get("weather") or [{}])[0]
    sys_info = raw.get("sys") or {}
    visibility = raw.get("visibility")
    icon = weather.get("icon")
    return {
        "temperature": float(main["temp"]),
        "feelsLike": float(main.get("feels_like", main["temp"])),
        "condition": (weather.get("description") or weather.get("main") or "Unknown").capitalize(),
        "iconUrl": OWM_ICON_URL.format(icon=icon) if icon else None,
        "humidity": float(main.get("humidity", 0)),
        # m/s -> km/h
        "windSpeed": round(float(wind.get("speed", 0.0)) * 3.6, 1),
        "pressure": float(main.get("pressure", 0)),
        "uvIndex": None,
        "visibility": round(visibility / 1000.0, 1) if visibility is not None else None,
        "sunrise": _iso_from_unix(sys_info.get("sunrise")),
        "sunset": _iso_from_unix(sys_info.get("sunset")),
        "source": "openweather",
    }


def current_from_open_meteo(raw: Dict[str, Any]) -> Dict[str, Any]:
    cur = raw.get("current") or {}
    daily = raw.get("daily") or {}
    if cur.get("temperature_2m") is None:
        raise WeatherUnavailable("Open-Meteo returned no current conditions")
    visibility = cur.get("visibility")
    return {
        "temperature": float(cur["temperature_2m"]),
        "feelsLike": float(cur.get("apparent_temperature") if cur.get("apparent_temperature") is not None else cur["temperature_2m"]),
        "condition": WMO_CONDITIONS.get(cur.get("weather_code"), "Unknown"),
        "iconUrl": None,
        "humidity": float(cur.get("relative_humidity_2m") or 0),
        "windSpeed": float(cur.get("wind_speed_10m") or 0.0),
        "pressure": float(cur.get("pressure_msl") or 0),
        "uvIndex": cur.get("uv_index"),
        "visibility": round(visibility / 1000.0, 1) if visibility is not None else None,
        "sunrise": _at(daily.get("sunrise", []), 0),
        "sunset": _at(daily.get("sunset", []), 0),
        "source": "open-meteo",
    }


def daily_from_open_meteo(raw: Dict[str, Any]) -> List[DailyForecast]:
    d = raw.get("daily") or {}
    out = []
    for i, day in enumerate(d.get("time", [])):
        code = _at(d.get("weather_code", []), i)
        out.append(DailyForecast(
            day=day,
            tempMin=_at(d.get("temperature_2m_min", []), i),
            tempMax=_at(d.get("temperature_2m_max", []), i),
            precipitationProbability=_at(d.get("precipitation_probability_max", []), i),
            precipitationMm=_at(d.get("precipitation_sum", []), i),
            condition=WMO_CONDITIONS.get(code) if code is not None else None,
        ))
    return out


def weather_advisories(daily: List[DailyForecast], codes: Optional[List[Optional[int]]] = None) -> List[str]:
    """Rule-based field advice from the daily forecast; each rule fires once, on its first day."""
    adv: List[str] = []
    seen = set()

    def add(rule: str, text: str) -> None:
        if rule not in seen:
            seen.add(rule)
            adv.append(text)

    for i, d in enumerate(daily):
        if d.tempMax is not None and d.tempMax >= 40:
            add("heat", f"High daytime temperatures expected from {d.day}; consider irrigation and heat stress measures.")
        if d.tempMin is not None and d.tempMin <= 2:
            add("frost", f"Low night temperatures expected from {d.day}; protect sensitive crops from frost.")
        if d.precipitationProbability is not None and d.precipitationProbability > 60:
            add("rain", f"High probability of heavy rain from {d.day}; secure seedlings and improve drainage.")
        code = codes[i] if codes and i < len(codes) else None
        if code in THUNDERSTORM_CODES:
            add("storm", f"Thunderstorm risk on {d.day}; avoid field operations and secure shade nets.")
    return adv


def get_weather_data(data: WeatherInput, client: Optional[httpx.Client] = None) -> WeatherData:
    logger.info("[Weather] Fetching weather data for: %s", data.location)
    place = geocode(data.location, client=client)

    forecast = None
    try:
        forecast = fetch_open_meteo(place["lat"], place["lon"], client=client)
        if not isinstance(forecast, dict):
            raise ValueError(f"expected a JSON object, got {type(forecast).__name__}")
    except (httpx.HTTPError, ValueError) as e:
        forecast = None
        logger.warning("[Weather] Open-Meteo forecast failed: %s", e)

    current = None
    api_key = get_weather_api_key()
    if api_key:
        try:
            current = current_from_openweather(fetch_openweather_current(place["lat"], place["lon"], api_key, client=client))
        except (httpx.HTTPError, AttributeError, KeyError, TypeError, ValueError) as e:
            # Unauthorized keys and outages both fall back to Open-Meteo
            logger.warning("[Weather] OpenWeather failed, falling back to Open-Meteo: %s", e)

    if current is None:
        if forecast is None:
            raise WeatherUnavailable("Failed to fetch weather data. Please try again later.")
        current = current_from_open_meteo(forecast)

    daily = daily_from_open_meteo(forecast) if forecast else []
    codes = ((forecast or {}).get("daily") or {}).get("weather_code") or []
    result = WeatherData(
        locationName=place["name"],
        daily=daily,
        advisories=weather_advisories(daily, codes),
        **current,
    )
    logger.info("[Weather] %s: %s C, %s (%s)", result.locationName, result.temperature, result.condition, result.source)
    return result
