"""
API configuration settings.
"""

from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings


class APIConfig(BaseSettings):
    """API configuration settings."""
    
    # API Settings
    api_title: str = "Book API"
    api_version: str = "1.0.0"
    api_description: str = "A small REST API for managing books"
    
    # Server Settings
    host: str = "0.0.0.0"
    port: int = 3000
    debug: bool = False
    
    # Database Settings
    mongodb_url: str = "mongodb://localhost:27017"
    mongodb_database: str = "assessment"
    mongodb_collection: str = "books"
    
    # Error log written by the error logging handler
    error_log_file: str = "error.log"
    
    # Delete the created book again when the delete half of add-then-delete fails
    compound_compensate: bool = False
    
    # Logging
    log_level: str = "INFO"
    log_format: str = "json"
    log_file: Optional[str] = None
    
    model_config = {
        "env_file": ".env",
        "extra": "ignore"  # Ignore extra fields from .env
    }
    
    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        """Ensure log level is valid."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f'log_level must be one of: {valid_levels}')
        return v.upper()
    
    @field_validator('log_format')
    @classmethod
    def validate_log_format(cls, v):
        """Ensure log format is valid."""
        valid_formats = ['json', 'console']
        if v.lower() not in valid_formats:
            raise ValueError(f'log_format must be one of: {valid_formats}')
        return v.lower()


# Global config instance
config = APIConfig()
