import pytest

from app.services.transliteration_service import TransliterationService


@pytest.mark.parametrize(
    "value,expected",
    [
        ("Київ", "Kyyiv"),
        ("Харків", "Kharkiv"),
        ("Щербак", "Shcherbak"),
        ("Згорани", "Z·horany"),
        ("ТОВ ЖИТЛОБУД", "TOV ZHYTLOBUD"),
        ("Олег 123", "Oleh 123"),
    ],
)
def test_ukrainian(value, expected):
    assert TransliterationService.for_language("uk").transliterate(value) == expected


def test_instances_are_cached_per_language():
    assert TransliterationService.for_language("uk") is TransliterationService.for_language("uk")


@pytest.mark.parametrize("lang", [None, "", "fr"])
def test_unsupported_language_passes_through(lang):
    assert TransliterationService.for_language(lang).transliterate("Київ") == "Київ"


@pytest.mark.parametrize("value", [None, "", "   "])
def test_blank_values_pass_through(value):
    assert TransliterationService.for_language("uk").transliterate(value) == value


def test_failure_returns_original_value(monkeypatch, caplog):
    def boom(*args):
        raise KeyError("x")

    monkeypatch.setattr("app.services.transliteration_service._romanize", boom)

    assert TransliterationService.for_language("uk").transliterate("Київ") == "Київ"
    assert "Transliteration to Latin failed" in caplog.text
