"""GPS verification service."""
import math
from typing import Dict

EARTH_RADIUS_METERS = 6371000

class GPSService:
    """Service for GPS and location verification."""
    
    @staticmethod
    def calculate_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
        """Calculate great-circle distance between two GPS points in meters."""
        lat1_rad = math.radians(lat1)
        lat2_rad = math.radians(lat2)
        delta_lat = math.radians(lat2 - lat1)
        delta_lon = math.radians(lon2 - lon1)
        
        a = (math.sin(delta_lat/2) ** 2 + 
             math.cos(lat1_rad) * math.cos(lat2_rad) * 
             math.sin(delta_lon/2) ** 2)
        c = 2 * math.atan2(math.sqrt(a), math.sqrt(1-a))
        
        return EARTH_RADIUS_METERS * c
    
    @staticmethod
    def verify_location(user_lat: float, user_lng: float,
                        center_lat: float, center_lng: float, radius_meters: float) -> Dict:
        """Verify if user is within a circular geofence (boundary inclusive)."""
        distance = GPSService.calculate_distance(user_lat, user_lng, center_lat, center_lng)
        
        return {
            'is_inside': distance <= radius_meters,
            'distance': distance,
            'radius': radius_meters,
            'center': {
                'latitude': center_lat,
                'longitude': center_lng
            }
        }
    
    @staticmethod
    def is_accuracy_acceptable(accuracy: float, threshold_meters: float) -> bool:
        """A reading no coarser than the threshold counts as verified."""
        return accuracy <= threshold_meters
