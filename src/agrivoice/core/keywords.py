"""Per-language keyword tables for offline intent matching.

Each table maps a feature id to an ordered tuple of trigger substrings.
Keys follow FEATURE_IDS order so iteration order is the tie-break priority.
Tables are read-only at runtime.
"""

from collections.abc import Mapping
from types import MappingProxyType
from typing import Final

from agrivoice.core.features import FEATURE_IDS

_ENGLISH: Final = {
    "home": ("home", "homepage", "dashboard", "main screen", "go back"),
    "twin": ("twin", "digital farm", "my farm", "soil status", "sensor"),
    "diagnose": (
        "diagnose",
        "disease",
        "crop doctor",
        "spots on",
        "yellow leaves",
        "wilting",
        "pest",
        "insect",
        "infected",
        "sick plant",
        "scan",
    ),
    "planner": ("planner", "plan", "calendar", "sowing", "sow ", "seeding", "harvest"),
    "knowledge": (
        "knowledge",
        "guide",
        "how to",
        "learn",
        "home remedies",
        "organic methods",
        "soil testing",
        "diy solutions",
    ),
    "expense": ("expense", "expenditure", "spend", "spent", "cost", "money", "accounts"),
    "weather": ("weather", "forecast", "rain", "storm", "temperature", "humidity"),
    "farmer-assistant": ("farmer assistant", "assistant", "to-do", "todo", "tasks"),
    "chatbot": ("chatbot", "chat", "talk to", "ask ai"),
    "alerts": ("alert", "notification", "warning"),
    "news": ("news", "headline", "update"),
    "forum": ("forum", "community", "discussion", "other farmers"),
    "schemes": ("scheme", "subsidy", "yojana", "government", "loan"),
    "buy-inputs": ("buy", "purchase", "shop", "order seeds", "inputs", "store"),
    "history": ("history", "previous", "past results", "recent activity"),
}

_HINDI: Final = {
    "home": ("होम", "मुख्य", "डैशबोर्ड", "घर जाना"),
    "twin": ("ट्विन", "मेरा खेत"),
    "diagnose": ("रोग", "बीमारी", "धब्बे", "कीट", "पत्ते पीले"),
    "planner": ("योजना", "कैलेंडर", "बुवाई", "कटाई"),
    "knowledge": ("ज्ञान", "जानकारी", "कैसे करें", "सीखना"),
    "expense": ("खर्च", "लागत", "पैसा", "हिसाब"),
    "weather": ("मौसम", "बारिश", "तूफान", "तापमान"),
    "farmer-assistant": ("किसान सहायक", "सहायक"),
    "chatbot": ("चैट", "बात करो"),
    "alerts": ("अलर्ट", "सूचना", "चेतावनी"),
    "news": ("समाचार", "न्यूज़", "खबर"),
    "forum": ("फोरम", "किसान फोरम", "चर्चा"),
    "schemes": ("योजनाएं", "सब्सिडी", "सरकारी", "ऋण"),
    "buy-inputs": ("खरीद", "बीज खरीद", "दुकान"),
    "history": ("इतिहास", "पिछला"),
}

_MALAYALAM: Final = {
    "home": ("ഹോം", "ഡാഷ്ബോർഡ്", "മുഖ്യം", "ഹോം പേജ്"),
    "twin": ("ട്വിൻ", "കാർഷിക ട്വിൻ", "ഡിജിറ്റൽ"),
    "diagnose": ("രോഗം", "രോഗനിർണയം", "രോഗ", "പുള്ളികൾ", "മഞ്ഞ ഇലകൾ", "കീടങ്ങൾ"),
    "planner": ("ആസൂത്രണം", "കലണ്ടർ", "വിത്തിടൽ", "വിതയൽ"),
    "knowledge": ("വിജ്ഞാനം", "അറിവ്", "ഗൈഡ്", "എങ്ങനെ", "വിജ്ഞാന കേന്ദ്രം"),
    "expense": ("ചെലവ്", "ചിലവ്", "പണം", "ചെലവായത്"),
    "weather": ("കാലാവസ്ഥ", "മഴ", "കൊടുങ്കാറ്റ്"),
    "farmer-assistant": ("കർഷക സഹായി", "സഹായി"),
    "chatbot": ("ചാറ്റ്", "അസിസ്റ്റന്റ്"),
    "alerts": ("അലർട്ട്", "അറിയിപ്പ്", "മുന്നറിയിപ്പ്"),
    "news": ("വാർത്ത", "ന്യൂസ്", "അപ്ഡേറ്റ്"),
    "forum": ("ഫോറം", "കർഷക ഫോറം", "ചർച്ച", "കമ്യൂണിറ്റി"),
    "schemes": ("പദ്ധതി", "സബ്സിഡി", "യോജന", "സർക്കാർ"),
    "buy-inputs": ("വാങ്ങുക", "ഷോപ്പിംഗ്", "ഓർഡർ"),
    "history": ("ചരിത്രം", "മുമ്പത്തെ"),
}


def _freeze(table: dict[str, tuple[str, ...]]) -> Mapping[str, tuple[str, ...]]:
    ordered = {fid: table[fid] for fid in FEATURE_IDS if fid in table}
    return MappingProxyType(ordered)


KEYWORD_TABLES: Final[Mapping[str, Mapping[str, tuple[str, ...]]]] = MappingProxyType(
    {
        "english": _freeze(_ENGLISH),
        "hindi": _freeze(_HINDI),
        "malayalam": _freeze(_MALAYALAM),
    }
)

SUPPORTED_LANGUAGES: Final = tuple(KEYWORD_TABLES)


def normalize_language(language: str | None) -> str:
    """Map a user-facing language name to a table key, English by default."""
    key = (language or "").strip().lower()
    return key if key in KEYWORD_TABLES else "english"


def keywords_for(language: str | None) -> list[tuple[str, str]]:
    """Return (feature_id, keyword) pairs to try, in priority order.

    The selected language's keywords come first within each feature,
    followed by the English ones (spoken commands often mix in English).
    """
    lang = normalize_language(language)
    tables = [KEYWORD_TABLES[lang]]
    if lang != "english":
        tables.append(KEYWORD_TABLES["english"])

    pairs: list[tuple[str, str]] = []
    for fid in FEATURE_IDS:
        for table in tables:
            pairs.extend((fid, kw) for kw in table.get(fid, ()))
    return pairs
