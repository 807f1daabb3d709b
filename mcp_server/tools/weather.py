"""Mock weather lookup tool."""

import logging
from typing import Any

logger = logging.getLogger(__name__)


def handle_weather(arguments: dict[str, Any]) -> dict[str, Any]:
    """Return canned weather data for a location.

    This is mock data; no external weather API is called.
    """
    location = arguments.get("location")
    if not isinstance(location, str) or not location.strip():
        raise ValueError("Location is required")

    weather_data = {
        "location": location,
        "temperature": "22°C",
        "condition": "Sunny",
        "humidity": "65%",
        "wind": "10 km/h",
        "note": "This is mock data. In production, integrate with a real weather API.",
    }
    logger.info(f"Weather lookup for {location}: {weather_data}")
    return weather_data
