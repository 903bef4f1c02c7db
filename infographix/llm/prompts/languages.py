"""Output languages supported for generated reports."""

from __future__ import annotations

from enum import Enum
from typing import Dict, List, Union


class Language(str, Enum):
    """Language the LLM writes the report in."""
    EN = "en"
    ZH = "zh"
    JA = "ja"
    KO = "ko"
    ES = "es"
    FR = "fr"
    DE = "de"
    PT = "pt"


DEFAULT_LANGUAGE = Language.EN

# (English name, native name)
LANGUAGE_NAMES: Dict[Language, tuple] = {
    Language.EN: ("English", "English"),
    Language.ZH: ("Chinese", "中文"),
    Language.JA: ("Japanese", "日本語"),
    Language.KO: ("Korean", "한국어"),
    Language.ES: ("Spanish", "Español"),
    Language.FR: ("French", "Français"),
    Language.DE: ("German", "Deutsch"),
    Language.PT: ("Portuguese", "Português"),
}


def resolve_language(value: Union[str, Language, None]) -> Language:
    """Map a language code to ``Language``; unknown or empty codes fall back to English."""
    if isinstance(value, Language):
        return value
    if not value:
        return DEFAULT_LANGUAGE
    try:
        return Language(str(value).strip().lower().split("-")[0])
    except ValueError:
        return DEFAULT_LANGUAGE


def supported_languages() -> List[dict]:
    return [
        {"code": lang.value, "name": names[0], "native_name": names[1]}
        for lang, names in LANGUAGE_NAMES.items()
    ]


def language_directive(language: Union[str, Language, None]) -> str:
    lang = resolve_language(language)
    name, native = LANGUAGE_NAMES[lang]
    if lang == Language.EN:
        return (
            "**OUTPUT LANGUAGE:** Write every human-readable string (title, summary, "
            "section titles, labels, descriptions) in English."
        )
    return (
        f"**OUTPUT LANGUAGE:** Write every human-readable string (title, summary, "
        f"section titles, labels, descriptions) in {name} ({native}). "
        f"Keep JSON keys and `type` values in English exactly as specified."
    )
