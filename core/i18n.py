"""Helpers for bilingual (``en`` / ``zh-TW``) JSON text fields."""

SUPPORTED_LANGUAGES = ('en', 'zh-TW')
DEFAULT_LANGUAGE = 'en'


def empty_bilingual():
    return {code: '' for code in SUPPORTED_LANGUAGES}


def missing_languages(value) -> dict:
    """Return ``{code: bool}`` telling which language variants are blank."""
    value = value if isinstance(value, dict) else {}
    return {code: not value.get(code) for code in SUPPORTED_LANGUAGES}


def is_complete(value) -> bool:
    return not any(missing_languages(value).values())


def normalize_bilingual(value, default=''):
    """Coerce loose client input into ``{"en": str, "zh-TW": str}``."""
    value = value if isinstance(value, dict) else {}
    return {code: str(value.get(code) or default) for code in SUPPORTED_LANGUAGES}


def resolve_language(raw):
    return raw if raw in SUPPORTED_LANGUAGES else DEFAULT_LANGUAGE


def localized(value, language, fallback=''):
    """Pick ``value[language]``; fall back to the given plain value."""
    if isinstance(value, dict):
        return value.get(language) or fallback
    return fallback
