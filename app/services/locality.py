from typing import Optional


def coarse_location(location: Optional[str]) -> Optional[str]:
    """City part of a free-text location: "San Jose, CA" -> "San Jose".

    Returns None for a missing or blank location so that riders without a
    location never group together.
    """
    if location is None:
        return None
    city = location.split(",", 1)[0].strip()
    return city or None
