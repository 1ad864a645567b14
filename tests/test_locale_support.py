from xbrl_survey.locale_support import normalize_locale_map, resolve_locale


def test_resolution_order():
    texts = {"en": "Hello", "fr": "Bonjour"}
    assert resolve_locale(texts, "en") == "Hello"
    assert resolve_locale(texts, "de") == "Bonjour"
    assert resolve_locale(texts) == "Bonjour"
    assert resolve_locale({"it": "Ciao", "es": "Hola"}, "de") == "Ciao"
    assert resolve_locale({}, "en") is None
    assert resolve_locale(None) is None


def test_normalize():
    assert normalize_locale_map("  Titre  ") == {"fr": "Titre"}
    assert normalize_locale_map({"en": " Title\n", "fr": "", "de": None}) == {"en": "Title"}
    assert normalize_locale_map("   ") == {}
    assert normalize_locale_map(None) == {}
