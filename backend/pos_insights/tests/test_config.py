import pytest
import yaml

from pos_insights.catalog import available_languages, get_catalog
from pos_insights.config import InsightSettings, Thresholds, load_thresholds
from pos_insights.formatting import format_currency, format_number, round_half_up
from pos_insights.insight_models import Period


@pytest.mark.parametrize(
    "value,expected",
    [
        (20000, "20.000"),
        (1234567.5, "1.234.567,5"),
        (12.3456, "12,346"),
        (0.0625, "0,063"),
        (2.0005, "2,001"),
        (999, "999"),
        (0, "0"),
        (-1500, "-1.500"),
    ],
)
def test_format_number_uses_indonesian_grouping(value, expected):
    assert format_number(value) == expected


def test_format_currency():
    assert format_currency(10500) == "Rp 10.500"


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(2.4) == 2
    assert round_half_up(10) == 10


def test_thresholds_default_without_file():
    assert load_thresholds(None) == Thresholds()


def test_thresholds_override_from_yaml(tmp_path):
    path = tmp_path / "thresholds.yaml"
    path.write_text(yaml.safe_dump({"thresholds": {"low_stock_max": 3, "revenue_high_daily": "250000"}}))

    thresholds = load_thresholds(str(path))

    assert thresholds.low_stock_max == 3
    assert thresholds.revenue_high_daily == 250000
    assert thresholds.slow_moving_min_stock == 20


def test_thresholds_reject_unknown_keys(tmp_path):
    path = tmp_path / "thresholds.yaml"
    path.write_text(yaml.safe_dump({"thresholds": {"low_stok": 3}}))

    with pytest.raises(ValueError, match="Unknown threshold keys"):
        load_thresholds(str(path))


def test_thresholds_reject_non_numeric_values(tmp_path):
    path = tmp_path / "thresholds.yaml"
    path.write_text(yaml.safe_dump({"thresholds": {"low_stock_max": "many"}}))

    with pytest.raises(ValueError):
        load_thresholds(str(path))


def test_missing_thresholds_file_raises(tmp_path):
    with pytest.raises(ValueError, match="not found"):
        load_thresholds(str(tmp_path / "missing.yaml"))


def test_settings_from_environment(monkeypatch, tmp_path):
    path = tmp_path / "thresholds.yaml"
    path.write_text(yaml.safe_dump({"thresholds": {"slow_moving_min_stock": 50}}))
    monkeypatch.setenv("INSIGHTS_LANGUAGE", "ID")
    monkeypatch.setenv("INSIGHTS_DEFAULT_PERIOD", "month")
    monkeypatch.setenv("INSIGHTS_THRESHOLDS_FILE", str(path))
    monkeypatch.setenv("CORS_ALLOW_ORIGIN", "https://kasir.example")

    settings = InsightSettings()

    assert settings.language == "id"
    assert settings.default_period is Period.MONTH
    assert settings.thresholds.slow_moving_min_stock == 50
    assert settings.cors_allow_origin == "https://kasir.example"
    assert settings.with_language("en").language == "en"
    assert settings.with_language(None) is settings


def test_settings_reject_unknown_default_period(monkeypatch):
    monkeypatch.setenv("INSIGHTS_DEFAULT_PERIOD", "forever")

    with pytest.raises(ValueError):
        InsightSettings(thresholds=Thresholds())


def test_catalogs_ship_both_languages():
    assert {"en", "id"} <= set(available_languages())
    assert get_catalog("id").weekdays[6] == "Sabtu"
    assert get_catalog("en").period_label(Period.TODAY) == "today"


@pytest.mark.parametrize("language", ["fr", "../catalogs/en", "x42"])
def test_unknown_language_falls_back_to_english(language):
    assert get_catalog(language).language == "en"
    assert get_catalog(language) is get_catalog("en")
