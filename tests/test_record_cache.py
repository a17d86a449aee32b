import unittest

from airpulse.domain import AirQualityRecord, CityIdentity, CityPayload
from airpulse.record_cache import InMemoryRecordCache


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def _record(city_id: str = "pune", aqi: int = 80) -> AirQualityRecord:
    payload = CityPayload(aqi=aqi, data_source="test")
    return AirQualityRecord.from_payload(CityIdentity(id=city_id, canonical_name=city_id.title(), state="Maharashtra"), payload)


class TestInMemoryRecordCachePerKey(unittest.TestCase):
    def setUp(self):
        self.clock = FakeClock()
        self.cache = InMemoryRecordCache(ttl_seconds=300, clock=self.clock)

    def test_put_get(self):
        rec = _record()
        self.cache.put("pune", rec)
        self.assertIs(self.cache.get("pune"), rec)
        self.assertIsNone(self.cache.get("delhi"))

    def test_entry_expires_after_ttl(self):
        self.cache.put("pune", _record())
        self.clock.advance(299)
        self.assertIsNotNone(self.cache.get("pune"))
        self.clock.advance(1)
        self.assertIsNone(self.cache.get("pune"))
        self.assertEqual(len(self.cache), 0)

    def test_entries_expire_independently(self):
        self.cache.put("pune", _record("pune"))
        self.clock.advance(200)
        self.cache.put("delhi", _record("delhi"))
        self.clock.advance(150)
        self.assertIsNone(self.cache.get("pune"))
        self.assertIsNotNone(self.cache.get("delhi"))

    def test_put_replaces_and_restarts_ttl(self):
        self.cache.put("pune", _record(aqi=80))
        self.clock.advance(250)
        self.cache.put("pune", _record(aqi=120))
        self.clock.advance(250)
        self.assertEqual(self.cache.get("pune").aqi, 120)

    def test_invalidate_and_clear(self):
        self.cache.put("pune", _record("pune"))
        self.cache.put("delhi", _record("delhi"))
        self.cache.invalidate("pune")
        self.cache.invalidate("missing")
        self.assertIsNone(self.cache.get("pune"))
        self.assertIsNotNone(self.cache.get("delhi"))
        self.cache.clear()
        self.assertEqual(len(self.cache), 0)

    def test_zero_ttl_never_hits(self):
        cache = InMemoryRecordCache(ttl_seconds=0, clock=self.clock)
        cache.put("pune", _record())
        self.assertIsNone(cache.get("pune"))
        self.assertEqual(len(cache), 0)

    def test_put_evicts_expired_entries(self):
        cache = InMemoryRecordCache(ttl_seconds=10, clock=self.clock)
        rec = _record()
        for i in range(1000):
            cache.put(f"custom_place{i}", rec)
        self.assertEqual(len(cache), 1000)

        self.clock.advance(10_000)
        cache.put("pune", rec)

        self.assertEqual(len(cache), 1)
        self.assertIs(cache.get("pune"), rec)

    def test_put_keeps_fresh_entries(self):
        self.cache.put("pune", _record("pune"))
        self.clock.advance(100)
        self.cache.put("delhi", _record("delhi"))
        self.assertEqual(len(self.cache), 2)

    def test_unknown_policy_rejected(self):
        with self.assertRaises(ValueError):
            InMemoryRecordCache(expiry="sometimes")


class TestInMemoryRecordCacheGlobal(unittest.TestCase):
    def setUp(self):
        self.clock = FakeClock()
        self.cache = InMemoryRecordCache(ttl_seconds=300, expiry="global", clock=self.clock)

    def test_generation_reset_drops_everything(self):
        self.cache.put("pune", _record("pune"))
        self.clock.advance(290)
        self.cache.put("delhi", _record("delhi"))
        self.clock.advance(11)
        # generation is now 301s old, so the fresh delhi entry goes too
        self.assertIsNone(self.cache.get("delhi"))
        self.assertIsNone(self.cache.get("pune"))

    def test_entries_survive_within_generation(self):
        self.cache.put("pune", _record("pune"))
        self.clock.advance(300)
        self.assertIsNotNone(self.cache.get("pune"))

    def test_new_generation_starts_on_reset(self):
        self.clock.advance(400)
        self.cache.put("pune", _record("pune"))
        self.clock.advance(200)
        self.assertIsNotNone(self.cache.get("pune"))

    def test_clear_restarts_generation(self):
        self.clock.advance(250)
        self.cache.clear()
        self.cache.put("pune", _record("pune"))
        self.clock.advance(100)
        self.assertIsNotNone(self.cache.get("pune"))


if __name__ == "__main__":
    unittest.main()
