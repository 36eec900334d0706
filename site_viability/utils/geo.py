"""Great-circle distance helpers"""

import math

EARTH_RADIUS_M = 6_371_000


def distance_in_meters(lat1: float, lng1: float, lat2: float, lng2: float) -> int:
    """Haversine distance between two coordinates, rounded to the nearest meter"""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    delta_phi = math.radians(lat2 - lat1)
    delta_lambda = math.radians(lng2 - lng1)

    a = (
        math.sin(delta_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(delta_lambda / 2) ** 2
    )
    angular_distance = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return int(math.floor(EARTH_RADIUS_M * angular_distance + 0.5))
