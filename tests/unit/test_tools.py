"""Unit tests for agent tools (HTTP calls are mocked)."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any
from unittest.mock import Mock

import pytest

from agent_workflows.tools import LLMTool, OpenMeteoTool, ToolError, WikipediaTool
from agent_workflows.tools.weather import FORECAST_URL, GEOCODING_URL


def _response(payload: dict[str, Any]) -> Mock:
    resp = Mock()
    resp.json.return_value = payload
    resp.raise_for_status.return_value = None
    return resp


def _session(*payloads: dict[str, Any]) -> Mock:
    session = Mock()
    session.headers = {}
    session.get.side_effect = [_response(p) for p in payloads]
    return session


def test_open_meteo_geocodes_then_fetches_current_weather() -> None:
    session = _session(
        {
            "results": [
                {"name": "Las Vegas", "country": "United States", "country_code": "US",
                 "latitude": 36.17, "longitude": -115.14},
            ]
        },
        {
            "current": {"time": "2025-01-01T12:00", "temperature_2m": 14.2, "wind_speed_10m": 9.0},
            "current_units": {"temperature_2m": "°C", "wind_speed_10m": "km/h"},
        },
    )
    tool = OpenMeteoTool(session=session)

    output = tool.run({"location": "Las Vegas"})

    assert "Las Vegas, United States" in output.text
    assert "temperature_2m: 14.2°C" in output.text
    assert "wind_speed_10m: 9.0km/h" in output.text

    geo_call, forecast_call = session.get.call_args_list
    assert geo_call.args[0] == GEOCODING_URL
    assert forecast_call.args[0] == FORECAST_URL
    assert forecast_call.kwargs["params"]["latitude"] == 36.17
    assert session.headers["User-Agent"] == "agent-workflows"


def test_open_meteo_filters_by_country_and_reports_missing_location() -> None:
    session = _session({"results": [{"name": "Paris", "country": "United States",
                                     "country_code": "US", "latitude": 1, "longitude": 2}]})
    tool = OpenMeteoTool(session=session)

    with pytest.raises(ToolError, match="Location not found"):
        tool.run({"location": "Paris", "country": "FR"})


def test_invalid_tool_input_is_a_tool_error() -> None:
    tool = OpenMeteoTool(session=_session())

    with pytest.raises(ToolError, match="Invalid input"):
        tool.run({"location": ""})


def test_wikipedia_returns_extracts_in_search_order() -> None:
    session = _session(
        {"query": {"search": [{"title": "Honey bee"}, {"title": "Bee"}]}},
        {
            "query": {
                "pages": {
                    "1": {"title": "Bee", "extract": "Bees are insects."},
                    "2": {"title": "Honey bee", "extract": "Honey bees make honey." * 10},
                }
            }
        },
    )
    tool = WikipediaTool(session=session, max_chars=20)

    output = tool.run({"query": "bees"})

    assert output.text.startswith("# Honey bee\nHoney bees make hon")
    assert "# Bee\nBees are insects." in output.text
    assert [r["title"] for r in output.data] == ["Honey bee", "Bee"]
    search_params = session.get.call_args_list[0].kwargs["params"]
    assert search_params["srsearch"] == "bees"
    assert search_params["format"] == "json"


def test_wikipedia_without_results() -> None:
    tool = WikipediaTool(session=_session({"query": {"search": []}}))

    output = tool.run({"query": "zzzz"})

    assert "No Wikipedia results" in output.text
    assert output.data == []


def test_llm_tool_delegates_to_model(make_llm: Callable[..., Any]) -> None:
    llm = make_llm("A short summary.")

    output = LLMTool(llm).run({"task": "Summarise bees"})

    assert output.text == "A short summary."
    assert llm.calls == [[{"role": "user", "content": "Summarise bees"}]]


def test_describe_includes_input_schema(make_llm: Callable[..., Any]) -> None:
    description = LLMTool(make_llm()).describe()

    assert description.startswith("LLM: ")
    assert '"task"' in description
