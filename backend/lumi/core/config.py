from pydantic_settings import BaseSettings
from typing import List, Optional, Any
from pydantic import field_validator
import json


class Settings(BaseSettings):
    # Lumi Branding
    assistant_name: str = "Lumi"
    timezone: str = "Asia/Kolkata"

    # LLM Configuration
    openai_base_url: str = "https://api.openai.com/v1"
    openai_api_key: str = "dummy"
    openai_model: str = "gpt-4.1-mini-2025-04-14"
    openai_timeout_s: float = 60.0

    # Agent loop
    agent_max_iterations: int = 8
    agent_history_limit: int = 20

    # Semantic memory (Weaviate)
    weaviate_url: str = "localhost:8080"
    weaviate_scheme: str = "http"
    weaviate_api_key: Optional[str] = None
    weaviate_openai_api_key: Optional[str] = None
    memory_class_name: str = "Memory"
    memory_search_limit: int = 10
    memory_list_limit: int = 100

    # Database
    database_url: str = "sqlite:///./lumi.db"

    # Tasks
    default_task_hour: int = 21  # 9 PM

    # Reflection reminders
    reflection_reminder_hour: int = 21
    reflection_reminder_minute: int = 0
    reflection_reminder_window_minutes: int = 60
    notifications_enabled: bool = True

    cors_origins: List[str] = ["http://localhost:8081", "http://localhost:19006"]

    class Config:
        env_file = ".env"

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _parse_cors_origins(cls, v: Any) -> Any:
        """Allow CORS_ORIGINS to be provided as JSON array or comma-separated string."""
        if isinstance(v, str):
            sv = v.strip()
            if not sv:
                return []
            if sv.startswith("["):
                try:
                    parsed = json.loads(sv)
                    if isinstance(parsed, list):
                        return parsed
                except ValueError:
                    pass
            # Fallback: comma-separated
            return [s.strip() for s in sv.split(",") if s.strip()]
        return v


settings = Settings()
