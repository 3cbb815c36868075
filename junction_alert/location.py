import requests
from geopy.geocoders import Nominatim

IPINFO_URL = "https://ipinfo.io/json"


def get_current_location(timeout: float = 10.0):
    """
    Get current lat/lon based on IP address (approximate).
    """
    try:
        res = requests.get(IPINFO_URL, timeout=timeout)
        res.raise_for_status()
        data = res.json()
        lat, lon = map(float, data["loc"].split(","))
        return lat, lon
    except (requests.RequestException, KeyError, ValueError) as e:
        raise RuntimeError(f"Could not get current location: {e}") from e


def describe_location(lat: float, lon: float) -> str:
    """Reverse geocode a coordinate to a human-readable address."""
    geolocator = Nominatim(user_agent="junction_alert")
    location = geolocator.reverse((lat, lon), language="en")
    return location.address if location else "Unknown location"


def get_area_info():
    lat, lon = get_current_location()
    return {
        "location": {
            "place_name": describe_location(lat, lon),
            "lat": round(lat, 6),
            "lon": round(lon, 6),
        },
    }
