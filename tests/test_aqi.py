import math
import unittest

from airpulse.aqi import AQICategory, PM25_BREAKPOINTS, aqi_category, aqi_from_pm25


class TestAqiFromPm25(unittest.TestCase):
    def test_breakpoint_boundaries_are_exact(self):
        cases = {
            0: 0,
            12.0: 50,
            35.4: 100,
            55.4: 150,
            150.4: 200,
            250.4: 300,
            350.4: 400,
            500.4: 500,
        }
        for pm25, expected in cases.items():
            with self.subTest(pm25=pm25):
                self.assertEqual(aqi_from_pm25(pm25), expected)

    def test_clamps_above_table(self):
        self.assertEqual(aqi_from_pm25(600), 500)
        self.assertEqual(aqi_from_pm25(10_000), 500)

    def test_interpolates_within_segment(self):
        expected = math.floor((150 - 101) / (55.4 - 35.5) * (40 - 35.5) + 101 + 0.5)
        self.assertEqual(aqi_from_pm25(40), expected)
        self.assertEqual(aqi_from_pm25(40), 112)
        self.assertEqual(aqi_from_pm25(6.0), 25)

    def test_negative_and_missing_inputs_are_zero(self):
        self.assertEqual(aqi_from_pm25(-3.2), 0)
        self.assertEqual(aqi_from_pm25(None), 0)
        self.assertEqual(aqi_from_pm25(float("nan")), 0)

    def test_monotonic_and_bounded(self):
        previous = -1
        c = 0.0
        while c <= 650.0:
            value = aqi_from_pm25(c)
            self.assertGreaterEqual(value, previous, msg=f"dropped at pm25={c}")
            self.assertGreaterEqual(value, 0)
            self.assertLessEqual(value, 500)
            previous = value
            c = round(c + 0.05, 2)

    def test_gap_between_segments_uses_next_segment(self):
        # 12.05 sits between the 12.0 and 12.1 breakpoints
        self.assertEqual(aqi_from_pm25(12.05), 51)
        self.assertEqual(aqi_from_pm25(35.45), 101)

    def test_table_is_ascending(self):
        highs = [bp.c_high for bp in PM25_BREAKPOINTS]
        self.assertEqual(highs, sorted(highs))


class TestAqiCategory(unittest.TestCase):
    def test_category_edges(self):
        self.assertEqual(aqi_category(0), AQICategory.GOOD)
        self.assertEqual(aqi_category(50), AQICategory.GOOD)
        self.assertEqual(aqi_category(51), AQICategory.MODERATE)
        self.assertEqual(aqi_category(100), AQICategory.MODERATE)
        self.assertEqual(aqi_category(150), AQICategory.UNHEALTHY_SENSITIVE)
        self.assertEqual(aqi_category(200), AQICategory.UNHEALTHY)
        self.assertEqual(aqi_category(300), AQICategory.VERY_UNHEALTHY)
        self.assertEqual(aqi_category(301), AQICategory.HAZARDOUS)
        self.assertEqual(aqi_category(500), AQICategory.HAZARDOUS)


if __name__ == "__main__":
    unittest.main()
