"""
Recreation.gov availability endpoints

These are the public (unauthenticated) endpoints the recreation.gov
booking pages call. They are undocumented and may change without notice.
"""
from datetime import date


BASE_URL = "https://www.recreation.gov"


class Endpoints:
    """
    Availability endpoints, rooted at a configurable base URL.
    """
    
    def __init__(self, base_url: str = BASE_URL):
        self.base_url = base_url.rstrip("/")
        self.api_base = f"{self.base_url}/api"
    
    def campsite_availability_all(self, campsite_id: str) -> str:
        """
        Full availability calendar for one campsite.
        
        GET /api/camps/availability/campsite/{id}/all
        """
        return f"{self.api_base}/camps/availability/campsite/{campsite_id}/all"
    
    def campground_month(self, facility_id: str, month: date) -> str:
        """
        Availability for every campsite in a campground for one month.
        
        GET /api/camps/availability/campground/{id}/month?start_date={ISO_DATE}
        
        The start_date is always the first of the month, e.g. "2025-08-01T00:00:00.000Z"
        """
        start_date = month.replace(day=1).strftime("%Y-%m-%dT00:00:00.000Z")
        return f"{self.api_base}/camps/availability/campground/{facility_id}/month?start_date={start_date}"


class WebPages:
    """URLs for pages a user can open"""
    
    @staticmethod
    def campsite(campsite_id: str) -> str:
        return f"{BASE_URL}/camping/campsites/{campsite_id}"


# Common request headers to mimic browser
DEFAULT_HEADERS = {
    "Accept": "application/json, text/plain, */*",
    "Accept-Language": "en-US,en;q=0.9",
    "Origin": "https://www.recreation.gov",
    "Referer": "https://www.recreation.gov/",
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
}


# Known response structures
#
# Single campsite (/campsite/{id}/all):
# {
#     "availability": {
#         "campsite_id": "12345",
#         "availabilities": {
#             "2025-08-15T00:00:00Z": "Available",
#             "2025-08-16T00:00:00Z": "Reserved",
#             ...
#         },
#         ...
#     }
# }
#
# Campground month (/campground/{id}/month):
# {
#     "campsites": {
#         "12345": {
#             "availabilities": {"2025-08-15T00:00:00Z": "Available", ...},
#             "site": "A001",
#             "loop": "A",
#             ...
#         },
#         ...
#     }
# }
