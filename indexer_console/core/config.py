"""
Configuration from environment variables
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "case_sensitive": True, "extra": "ignore"}
    """Console settings from environment variables"""
    
    # Indexer service
    API_BASE_URL: str = "http://localhost:8000"
    HTTP_TIMEOUT: float = 30.0
    
    # Persisted session (token + user)
    SESSION_FILE: str = "~/.growin_console/session.json"
    
    # Logging
    LOG_LEVEL: str = "INFO"
    
    # Polling intervals (seconds)
    JOB_STATUS_POLL_SECONDS: float = 5.0
    JOB_LIST_POLL_SECONDS: float = 5.0
    LOG_TAIL_POLL_SECONDS: float = 3.0
    
    # Search debounce quiet periods (seconds)
    SEARCH_TEXT_DEBOUNCE_SECONDS: float = 0.5
    SEARCH_FILTER_DEBOUNCE_SECONDS: float = 0.3
    
    # Keep tailing logs after the job finished (residual shutdown logs)
    LOG_TAIL_STOP_ON_TERMINAL: bool = False


# Global settings instance
settings = Settings()
