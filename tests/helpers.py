from junction_alert.alerts import AlertSink
from junction_alert.geometry import destination

LON0, LAT0 = -122.4194, 37.7749
D = 0.0005  # ~44 m east-west, ~55 m north-south


class RecordingAlertSink(AlertSink):
    def __init__(self):
        self.notifications = []
        self.vibrations = []
        self.spoken = []

    def notify(self, title, body, sound=True, data=None):
        self.notifications.append({"title": title, "body": body, "sound": sound, "data": data})

    def vibrate(self, pattern):
        self.vibrations.append(list(pattern))

    def speak(self, text):
        self.spoken.append(text)


class FakeClock:
    def __init__(self, t=1000.0):
        self.t = t

    def __call__(self):
        return self.t

    def advance(self, dt):
        self.t += dt


def offset(lon, lat, meters, bearing_deg):
    return destination(lon, lat, meters, bearing_deg)


def road(coords, cls="residential"):
    return {
        "type": "Feature",
        "geometry": {"type": "LineString", "coordinates": [list(c) for c in coords]},
        "properties": {"class": cls},
    }


def multi_road(parts, cls="residential"):
    return {
        "type": "Feature",
        "geometry": {"type": "MultiLineString", "coordinates": [[list(c) for c in part] for part in parts]},
        "properties": {"class": cls},
    }


def node(lon, lat, **props):
    return {"type": "Feature", "geometry": {"type": "Point", "coordinates": [lon, lat]}, "properties": props}


def star_roads(lon=LON0, lat=LAT0, d=D):
    """Three straight roads pairwise crossing at (lon, lat)."""
    return [
        road([(lon - d, lat), (lon + d, lat)]),
        road([(lon, lat - d), (lon, lat + d)]),
        road([(lon - d, lat - d), (lon + d, lat + d)]),
    ]


def cross_roads(lon=LON0, lat=LAT0, d=D):
    """Two straight roads crossing at (lon, lat)."""
    return star_roads(lon, lat, d)[:2]


