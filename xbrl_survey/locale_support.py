"""
Locale resolution for labels, titles and instructions.

Text that exists in several languages is held as a plain ``{locale: text}``
dict. Callers pass the locale they want explicitly; resolution falls back to
the default locale, then to whatever language is available first.
"""

from __future__ import annotations

from typing import Any, Optional

DEFAULT_LOCALE = "fr"
SUPPORTED_LOCALES = ("fr", "en")


def normalize_locale_map(value: Any) -> dict[str, str]:
    """Turn a YAML title/instructions value into a locale map.

    A bare string is taken to be written in the default locale. Values are
    stripped and empty entries dropped.
    """
    if value is None:
        return {}
    if isinstance(value, dict):
        result = {}
        for locale, text in value.items():
            if text is None:
                continue
            text = str(text).strip()
            if text:
                result[str(locale)] = text
        return result
    text = str(value).strip()
    return {DEFAULT_LOCALE: text} if text else {}


def resolve_locale(texts: Optional[dict], locale: Optional[str] = None,
                   fallback: str = DEFAULT_LOCALE):
    """Pick the best entry of ``texts`` for ``locale``.

    Order: requested locale, fallback locale, first available, None.
    """
    if not texts:
        return None
    if locale and locale in texts:
        return texts[locale]
    if fallback in texts:
        return texts[fallback]
    return next(iter(texts.values()))
