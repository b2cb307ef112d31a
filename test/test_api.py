"""Tests for the HTTP endpoints."""

import unittest

from fastapi.testclient import TestClient

from measurelib.api import INVALID_MEASUREMENTS, NON_POSITIVE, app
from measurelib.locker import recommend


def body(length_mm=250, width_mm=180, height_mm=95.8, **extra):
    payload = {"measurements": {"length_mm": length_mm, "width_mm": width_mm, "height_mm": height_mm}}
    payload.update(extra)
    return payload


class TestMeasureParcel(unittest.TestCase):
    def setUp(self):
        self.client = TestClient(app)

    def test_valid_request(self):
        response = self.client.post("/measure-parcel", json=body(metadata={"device": "test"}))
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertTrue(data["success"])
        self.assertIn("timestamp", data)
        self.assertEqual(data["lockerRecommendation"], recommend(250, 180, 95.8).to_dict())

    def test_matches_pure_function(self):
        for dims in [(250, 180, 110.3), (250, 180, 301.1), (400, 180, 50), (500, 385, 50)]:
            response = self.client.post("/measure-parcel", json=body(*dims))
            self.assertEqual(response.status_code, 200)
            self.assertEqual(response.json()["lockerRecommendation"]["size"], recommend(*dims).size)

    def test_negative_dimension(self):
        response = self.client.post("/measure-parcel", json=body(length_mm=-1))
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"success": False, "error": NON_POSITIVE})

    def test_integer_beyond_float_range(self):
        response = self.client.post("/measure-parcel", json=body(length_mm=int("9" * 400)))
        self.assertEqual(response.status_code, 400)
        self.assertFalse(response.json()["success"])

    def test_zero_dimension(self):
        response = self.client.post("/measure-parcel", json=body(height_mm=0))
        self.assertEqual(response.status_code, 400)

    def test_missing_field(self):
        response = self.client.post("/measure-parcel",
                                    json={"measurements": {"length_mm": 1, "width_mm": 2}})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"success": False, "error": INVALID_MEASUREMENTS})

    def test_missing_measurements(self):
        response = self.client.post("/measure-parcel", json={"metadata": {}})
        self.assertEqual(response.status_code, 400)

    def test_non_numeric_fields(self):
        for bad in ("250", True, None, [250]):
            response = self.client.post("/measure-parcel", json=body(length_mm=bad))
            self.assertEqual(response.status_code, 400, msg=repr(bad))
            self.assertFalse(response.json()["success"])

    def test_non_json_body(self):
        response = self.client.post("/measure-parcel", content=b"not json",
                                    headers={"Content-Type": "application/json"})
        self.assertEqual(response.status_code, 400)
        self.assertFalse(response.json()["success"])

    def test_get_not_allowed(self):
        response = self.client.get("/measure-parcel")
        self.assertEqual(response.status_code, 405)
        self.assertEqual(response.json(), {"success": False, "error": "Method not allowed"})

    def test_cors_any_origin(self):
        response = self.client.post("/measure-parcel", json=body(),
                                    headers={"Origin": "https://example.com"})
        self.assertEqual(response.headers["access-control-allow-origin"], "*")


class TestTestEndpoint(unittest.TestCase):
    def test_descriptor(self):
        response = TestClient(app).get("/test")
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertTrue(data["success"])
        self.assertIn("POST /measure-parcel", data["endpoints"])


if __name__ == "__main__":
    unittest.main()
