import pytest

from airpulse.conditions import WeatherCondition, normalize_condition


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("Patchy rain nearby", WeatherCondition.RAIN),
        ("Light drizzle", WeatherCondition.RAIN),
        ("Light rain shower, overcast", WeatherCondition.RAIN),
        ("Partly cloudy", WeatherCondition.CLOUDY),
        ("Overcast", WeatherCondition.CLOUDY),
        ("Mist", WeatherCondition.PARTLY_CLOUDY),
        ("Freezing fog", WeatherCondition.PARTLY_CLOUDY),
        ("Sunny", WeatherCondition.CLEAR),
        ("CLEAR", WeatherCondition.CLEAR),
        ("Haze", WeatherCondition.PARTLY_CLOUDY),
        ("", WeatherCondition.PARTLY_CLOUDY),
        (None, WeatherCondition.PARTLY_CLOUDY),
    ],
)
def test_normalize_condition(raw, expected):
    assert normalize_condition(raw) is expected


def test_partly_cloudy_serializes_with_space():
    assert WeatherCondition.PARTLY_CLOUDY.value == "Partly Cloudy"
