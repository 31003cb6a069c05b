"""
Core configuration for the Livestock AMU API.
Manages environment variables, reference data location and integration settings.
"""
import os
from pathlib import Path
from pydantic_settings import BaseSettings


DEFAULT_REFERENCE_DATA_PATH = str(Path(__file__).resolve().parent.parent / "data" / "withdrawal_periods.json")


class Settings(BaseSettings):
    """Application settings loaded from environment variables or .env file."""

    # AWS Configuration
    aws_region: str = os.getenv("AWS_REGION", "us-east-1")
    treatments_table_name: str = os.getenv("TREATMENTS_TABLE_NAME", "")

    # Reference data (withdrawal rules and banned substances)
    reference_data_path: str = os.getenv("REFERENCE_DATA_PATH", DEFAULT_REFERENCE_DATA_PATH)

    # API Configuration
    api_title: str = os.getenv("API_TITLE", "Livestock AMU API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")

    # Pagination Configuration
    pagination_default_limit: int = int(os.getenv("PAGINATION_DEFAULT_LIMIT", "10"))
    pagination_max_limit: int = int(os.getenv("PAGINATION_MAX_LIMIT", "100"))

    # Google Sheets export
    google_service_account: str = os.getenv("GOOGLE_SERVICE_ACCOUNT", "")
    google_sheets_spreadsheet_id: str = os.getenv("GOOGLE_SHEETS_SPREADSHEET_ID", "")
    google_sheets_sheet_name: str = os.getenv("GOOGLE_SHEETS_SHEET_NAME", "Treatments")

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # Environment
    environment: str = os.getenv("ENVIRONMENT", "dev")

    class Config:
        env_file = ".env"
        case_sensitive = False


# Global settings instance
settings = Settings()
