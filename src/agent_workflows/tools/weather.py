"""Current weather from the Open-Meteo API (no API key required)."""

from __future__ import annotations

import logging
from typing import Any

import requests
from pydantic import BaseModel, Field

from .base import Tool, ToolError, ToolOutput

logger = logging.getLogger(__name__)

GEOCODING_URL = "https://geocoding-api.open-meteo.com/v1/search"
FORECAST_URL = "https://api.open-meteo.com/v1/forecast"

CURRENT_FIELDS = (
    "temperature_2m",
    "apparent_temperature",
    "relative_humidity_2m",
    "precipitation",
    "weather_code",
    "wind_speed_10m",
)


class OpenMeteoInput(BaseModel):
    location: str = Field(min_length=1, description="City or place name, e.g. 'Las Vegas'")
    country: str | None = Field(default=None, description="Optional country name or code")
    temperature_unit: str = Field(default="celsius", pattern="^(celsius|fahrenheit)$")


class OpenMeteoTool(Tool):
    name = "OpenMeteo"
    description = "Retrieve current weather conditions for a named location."
    input_model = OpenMeteoInput

    def __init__(self, session: requests.Session | None = None) -> None:
        self._session = session or requests.Session()
        self._session.headers.update({"User-Agent": "agent-workflows"})

    def _geocode(self, tool_input: OpenMeteoInput) -> dict[str, Any]:
        params: dict[str, Any] = {"name": tool_input.location, "count": 5, "format": "json"}
        resp = self._session.get(GEOCODING_URL, params=params, timeout=30)
        resp.raise_for_status()
        results = resp.json().get("results") or []

        if tool_input.country:
            wanted = tool_input.country.strip().lower()
            results = [
                r
                for r in results
                if wanted in {str(r.get("country", "")).lower(), str(r.get("country_code", "")).lower()}
            ]
        if not results:
            raise ToolError(f"Location not found: {tool_input.location}")
        return results[0]

    def _run(self, tool_input: OpenMeteoInput) -> ToolOutput:
        place = self._geocode(tool_input)
        params = {
            "latitude": place["latitude"],
            "longitude": place["longitude"],
            "current": ",".join(CURRENT_FIELDS),
            "temperature_unit": tool_input.temperature_unit,
            "timezone": "auto",
        }
        resp = self._session.get(FORECAST_URL, params=params, timeout=30)
        resp.raise_for_status()
        data = resp.json()

        current = data.get("current") or {}
        units = data.get("current_units") or {}
        label = ", ".join(str(p) for p in (place.get("name"), place.get("country")) if p)
        logger.debug("Fetched weather", extra={"location": label})

        lines = [f"Current weather for {label} ({current.get('time', 'now')}):"]
        for key in CURRENT_FIELDS:
            if key in current:
                lines.append(f"- {key}: {current[key]}{units.get(key, '')}")
        return ToolOutput(text="\n".join(lines), data={"location": place, "current": current})

    def close(self) -> None:
        self._session.close()
