"""Development configuration."""
import os

from .base import BaseConfig

class DevelopmentConfig(BaseConfig):
    """Development configuration class."""
    
    DEBUG = True
    TESTING = False
    
    # Database
    SQLALCHEMY_DATABASE_URI = os.getenv('DEV_DATABASE_URL') or 'sqlite:///campus_checkin_dev.db'
    SQLALCHEMY_ECHO = False
    
    # Redis (optional in dev)
    REDIS_URL = os.getenv('REDIS_URL')
    
    LOG_LEVEL = 'DEBUG'
