"""
Tests for API endpoints (campwatch/api/endpoints.py)
"""
from datetime import date

from campwatch.api.endpoints import Endpoints, WebPages, DEFAULT_HEADERS, BASE_URL


class TestEndpoints:
    def test_campsite_availability_all(self):
        url = Endpoints().campsite_availability_all("12345")
        assert url == f"{BASE_URL}/api/camps/availability/campsite/12345/all"

    def test_campground_month_uses_first_of_month(self):
        url = Endpoints().campground_month("232447", date(2030, 8, 17))
        assert "api/camps/availability/campground/232447/month" in url
        assert url.endswith("start_date=2030-08-01T00:00:00.000Z")

    def test_custom_base_url(self):
        endpoints = Endpoints("http://localhost:8080/")
        assert endpoints.api_base == "http://localhost:8080/api"
        assert endpoints.campsite_availability_all("1").startswith("http://localhost:8080/api/")


class TestWebPages:
    def test_campsite(self):
        assert WebPages.campsite("99999") == "https://www.recreation.gov/camping/campsites/99999"


class TestDefaultHeaders:
    def test_has_browser_headers(self):
        assert "User-Agent" in DEFAULT_HEADERS
        assert DEFAULT_HEADERS["Origin"] == "https://www.recreation.gov"
