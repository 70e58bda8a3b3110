from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    app_env: str = Field("development", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    # Sheet names used by templates and imports
    bulk_data_sheet_name: str = Field("Data", alias="BULK_DATA_SHEET_NAME")
    bulk_instructions_sheet_name: str = Field("Instruksi", alias="BULK_INSTRUCTIONS_SHEET_NAME")

    # Placeholder text that marks a template example row
    bulk_example_marker: str = Field("Contoh", alias="BULK_EXAMPLE_MARKER")
    bulk_date_dayfirst: bool = Field(True, alias="BULK_DATE_DAYFIRST")

    # Rows covered by template dropdowns
    bulk_template_max_rows: int = Field(500, alias="BULK_TEMPLATE_MAX_ROWS")
    bulk_max_upload_bytes: int = Field(10 * 1024 * 1024, alias="BULK_MAX_UPLOAD_BYTES")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"
        populate_by_name = True


settings = Settings()
