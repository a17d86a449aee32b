import os
import unittest

from pydantic import ValidationError

from airpulse.config import Settings


class _EnvPatch:
    """Set environment variables for the duration of a block."""

    def __init__(self, **values):
        self.values = values
        self.previous = {}

    def __enter__(self):
        for key, value in self.values.items():
            self.previous[key] = os.environ.get(key)
            if value is None:
                os.environ.pop(key, None)
            else:
                os.environ[key] = value
        return self

    def __exit__(self, *exc):
        for key, value in self.previous.items():
            if value is None:
                os.environ.pop(key, None)
            else:
                os.environ[key] = value
        return False


class TestConfig(unittest.TestCase):
    def test_settings_defaults(self):
        with _EnvPatch(AIRPULSE_CACHE_TTL_SECONDS=None, AIRPULSE_CACHE_EXPIRY=None, AIRPULSE_WEATHERAPI_BASE_URL=None):
            s = Settings()
        self.assertEqual(s.cache_ttl_seconds, 300)
        self.assertEqual(s.cache_expiry, "per_key")
        self.assertEqual(s.weatherapi_base_url, "https://api.weatherapi.com/v1")
        self.assertEqual(s.data_source, "weatherapi")

    def test_ttl_override(self):
        with _EnvPatch(AIRPULSE_CACHE_TTL_SECONDS="60"):
            self.assertEqual(Settings().cache_ttl_seconds, 60)

    def test_negative_ttl_rejected(self):
        with _EnvPatch(AIRPULSE_CACHE_TTL_SECONDS="-1"):
            with self.assertRaises(ValidationError):
                Settings()

    def test_unknown_expiry_rejected(self):
        with _EnvPatch(AIRPULSE_CACHE_EXPIRY="hourly"):
            with self.assertRaises(ValidationError):
                Settings()

    def test_unprefixed_api_keys_are_accepted(self):
        with _EnvPatch(
            AIRPULSE_WEATHER_API_KEY=None,
            AIRPULSE_GEMINI_API_KEY=None,
            WEATHER_API_KEY="w-key",
            GEMINI_API_KEY="g-key",
        ):
            s = Settings()
        self.assertEqual(s.weather_api_key, "w-key")
        self.assertEqual(s.gemini_api_key, "g-key")

    def test_base_url_trailing_slash_stripped(self):
        with _EnvPatch(AIRPULSE_WEATHERAPI_BASE_URL="http://localhost:9000/v1/"):
            self.assertEqual(Settings().weatherapi_base_url, "http://localhost:9000/v1")

    def test_extra_stopwords_from_json(self):
        with _EnvPatch(AIRPULSE_EXTRA_STOPWORDS='["near", "around"]'):
            self.assertEqual(Settings().extra_stopwords, ["near", "around"])


if __name__ == "__main__":
    unittest.main()
