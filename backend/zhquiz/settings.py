from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List
from pydantic import AliasChoices, Field

class Settings(BaseSettings):
	# Either name works; API_KEY is what the hosted deployment sets
	gemini_api_key: str | None = Field(default=None, validation_alias=AliasChoices("API_KEY", "GEMINI_API_KEY"))
	# Provider can be "vertex" (Vertex AI Express) or "ai_studio" (Generative Language API)
	gemini_provider: str = Field(default="ai_studio", validation_alias="GEMINI_PROVIDER")
	gemini_model: str = Field(default="gemini-2.5-flash", validation_alias="GEMINI_MODEL")
	# Vertex configuration
	vertex_region: str = Field(default="us-central1", validation_alias="GEMINI_VERTEX_REGION")
	vertex_project: str | None = Field(default=None, validation_alias="GEMINI_VERTEX_PROJECT")
	gemini_timeout_seconds: float = Field(default=60.0, validation_alias="GEMINI_TIMEOUT_SECONDS")
	# Unset leaves the model default; 0 turns thinking off on 2.5 Flash
	gemini_thinking_budget: int | None = Field(default=None, validation_alias="GEMINI_THINKING_BUDGET")

	# Where the generation client finds the quiz service
	quiz_service_url: str = Field(default="http://localhost:8000/api/gemini", validation_alias="QUIZ_SERVICE_URL")
	quiz_client_timeout_seconds: float = Field(default=90.0, validation_alias="QUIZ_CLIENT_TIMEOUT_SECONDS")
	max_questions: int = Field(default=20, ge=1, validation_alias="MAX_QUESTIONS")

	# Browser frontends allowed to call the API (JSON list in the environment)
	cors_origins: List[str] = Field(default=["http://localhost:5173", "http://localhost:3000"], validation_alias="CORS_ORIGINS")

	host: str = Field(default="127.0.0.1", validation_alias="HOST")
	port: int = Field(default=8000, validation_alias="PORT")

	environment: str = Field(default="development", validation_alias="ENVIRONMENT")
	log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

	# pydantic-settings v2 style config
	model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()
