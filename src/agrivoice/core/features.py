"""Feature registry: the closed, ordered set of navigable app features.

The id strings must stay byte-identical with the navigation component that
consumes decisions. Registry order doubles as the keyword classifier's
tie-break priority.
"""

from types import MappingProxyType
from typing import Final

FEATURE_IDS: Final = (
    "home",
    "twin",
    "diagnose",
    "planner",
    "knowledge",
    "expense",
    "weather",
    "farmer-assistant",
    "chatbot",
    "alerts",
    "news",
    "forum",
    "schemes",
    "buy-inputs",
    "history",
)

FEATURE_DESCRIPTIONS: Final = MappingProxyType(
    {
        "home": "main dashboard with weather summary and quick actions",
        "twin": "digital twin of the farm: fields, crops, sensors and soil status",
        "diagnose": "identify crop diseases or pests from symptoms or a photo",
        "planner": "crop calendar, sowing and harvest planning",
        "knowledge": "guides, how-to articles, organic methods and home remedies",
        "expense": "track money spent on the farm: costs, purchases, accounts",
        "weather": "weather forecast, rain, storms and temperature",
        "farmer-assistant": "step-by-step farm task assistant and daily to-dos",
        "chatbot": "open-ended conversation with the AI assistant",
        "alerts": "notifications and warnings (pest outbreaks, weather alerts)",
        "news": "agriculture news and headlines",
        "forum": "community discussions with other farmers",
        "schemes": "government schemes, subsidies and loans",
        "buy-inputs": "buy seeds, fertilizer, pesticides and tools",
        "history": "previous diagnoses, queries and activity log",
    }
)

ACTIONS: Final = ("navigate", "chat", "weather", "popup", "tab")


def is_known_feature(feature_id: object) -> bool:
    """Return True if *feature_id* is a registry id."""
    return isinstance(feature_id, str) and feature_id in FEATURE_IDS


def describe_features() -> str:
    """One line per feature, in registry order, for prompt embedding."""
    return "\n".join(f"- {fid}: {FEATURE_DESCRIPTIONS[fid]}" for fid in FEATURE_IDS)
