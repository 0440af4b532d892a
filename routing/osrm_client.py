#Purpose: The OSRM "adapter/client".
#Sole responsibility: talk to OSRM via HTTP and return normalized outputs.
#Encapsulates OSRM-specific details:
#coordinate formatting (lon,lat)
#URL construction (/route)
#timeouts and error handling
#parsing response JSON into kilometres / minutes
#It should not contain fallback policy or pricing.


from dotenv import load_dotenv
import os
from typing import Dict, List, Optional
import requests

from routing.geo import Coordinate

# Read OSRM base URL from environment
# Example in .env:
# OSRM_BASE_URL=http://router.project-osrm.org
load_dotenv()


class OSRMError(Exception):
    """Custom exception for OSRM client errors."""
    pass


class OSRMClient:
    """
    OSRM Adapter / Client

    Sole responsibility:
    - Talk to OSRM via HTTP
    - Convert internal Coordinate -> OSRM "lon,lat"
    - Return normalized outputs (km, minutes)

    """
    def __init__(self, base_url: Optional[str] = None, profile: str = "driving", timeout: int = 5):
        self.base_url = base_url or os.getenv("OSRM_BASE_URL")
        self.timeout = timeout #seconds to wait for OSRM before giving up
        self.profile = profile #the mode of transportation (driving, walking, cycling)

        if not self.base_url:
            raise ValueError("OSRM base URL not set. Please set OSRM_BASE_URL in the .env file.")

        self.base_url = self.base_url.rstrip("/")

    def format_coordinates(self, coords: List[Coordinate]) -> str:
        """Convert list of Coordinate to OSRM format 'lon,lat;lon,lat;...'"""
        return ';'.join(f"{c.longitude},{c.latitude}" for c in coords)

    def compute_route(self, coordinates: List[Coordinate]) -> Dict[str, float]:
        """
        Calls the OSRM /route endpoint with the given coordinates.

        Returns:
            {
                "distance_km": float,
                "duration_min": float,
            }

        Raises:
            OSRMError when OSRM answers with a non-Ok code or an unusable payload.
            requests.RequestException on transport failures.
        """
        if len(coordinates) < 2:
            raise ValueError("At least two coordinates are required to compute a route.")

        url = f"{self.base_url}/route/v1/{self.profile}/{self.format_coordinates(coordinates)}"

        response = requests.get(
            url,
            params={
                "overview": "false", # we don't need the geometry of the route
            },
            timeout=self.timeout,
        )

        try:
            data = response.json()
        except ValueError as error:
            raise OSRMError(f"OSRM returned a non-JSON response (HTTP {response.status_code})") from error

        if data.get("code") != "Ok":
            raise OSRMError(f"OSRM error: {data.get('message', 'Unknown error')}")

        routes = data.get("routes") or []
        if not routes:
            raise OSRMError("OSRM returned no routes")

        route = routes[0] #take the first route (OSRM may return alternatives)

        #Normalize output: meters -> km, seconds -> minutes
        return {
            "distance_km": float(route["distance"]) / 1000.0,
            "duration_min": float(route["duration"]) / 60.0,
        }
