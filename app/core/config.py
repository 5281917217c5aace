from typing import List, Union, Optional
from pydantic import AnyHttpUrl, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    PROJECT_NAME: str = "Farm Inventory Service"
    API_V1_STR: str = "/api/v1"
    LOG_LEVEL: str = "INFO"

    # CORS
    BACKEND_CORS_ORIGINS: List[AnyHttpUrl] = []

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v: Union[str, List[str]]) -> Union[List[str], str]:
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",") if i.strip()]
        elif isinstance(v, (list, str)):
            return v
        raise ValueError(v)

    # Record store
    RECORD_STORE_URL: str = "http://localhost:8080/api"
    RECORD_STORE_PROJECT_ID: Optional[str] = None
    RECORD_STORE_PUBLIC_KEY: Optional[str] = None
    RECORD_STORE_TIMEOUT: float = 30.0

    # Tables
    INVENTORY_TABLE: str = "inventory_c"
    FARM_TABLE: str = "farm_c"

    @model_validator(mode='after')
    def normalize_record_store_url(self) -> 'Settings':
        self.RECORD_STORE_URL = self.RECORD_STORE_URL.rstrip("/")
        self.LOG_LEVEL = self.LOG_LEVEL.upper()
        return self

    model_config = SettingsConfigDict(case_sensitive=True, env_file=".env", extra='ignore')

settings = Settings()
