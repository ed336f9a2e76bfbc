"""Settings shared by every environment."""
import os
from datetime import timedelta

class BaseConfig:
    """Base configuration."""
    SECRET_KEY = os.getenv('SECRET_KEY') or 'dev-secret-key-change-in-production'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = False
    
    # JWT Configuration
    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY') or 'dev-jwt-secret-key-change-in-production'
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=2)
    JWT_REFRESH_TOKEN_EXPIRES = timedelta(days=7)
    JWT_ALGORITHM = 'HS256'
    
    # CORS
    CORS_ORIGINS = ["http://localhost:*", "http://127.0.0.1:*"]
    
    # Rate Limiting
    RATELIMIT_STORAGE_URI = os.getenv('REDIS_URL') or 'memory://'
    RATELIMIT_DEFAULT = "200 per day;50 per hour"
    
    # Check-in policy
    CLOCK_SKEW_TOLERANCE_SECONDS = 60
    ATTENDANCE_GRACE_PERIOD_MINUTES = 5
    GEOFENCE_RADIUS_OVERRIDE_METERS = None  # None: use each session's radius
    DEFAULT_GEOFENCE_RADIUS_METERS = 50
    GPS_ACCURACY_THRESHOLD_METERS = 100
    
    # Sessions
    DEFAULT_SESSION_DURATION_MINUTES = 90
    MAX_SESSION_DURATION_MINUTES = 240
    DEMO_SESSION_SWEEP_INTERVAL_SECONDS = 300
    DEMO_SESSION_IDLE_GRACE_SECONDS = 60
    
    # QR codes
    QR_SIGNING_KEY = os.getenv('QR_SIGNING_KEY') or 'dev-qr-signing-key-change-in-production'
    
    # Logging
    LOG_LEVEL = 'INFO'
    LOG_FILE = 'logs/app.log'
