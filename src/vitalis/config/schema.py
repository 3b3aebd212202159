"""Pydantic models for vitalis.yaml configuration."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class Persona(BaseModel):
    """Static assistant persona interpolated into every system prompt."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(default="Vita", description="Assistant name")
    role: str = Field(
        default="a careful, friendly AI health companion",
        description="Who the assistant is",
    )
    tone: str = Field(default="Warm, calm and concise", description="Conversational tone")
    directives: tuple[str, ...] = Field(
        default=(
            "Never give a definitive diagnosis.",
            "Recommend seeing a doctor for severe or persistent symptoms.",
            "Respect the user's known allergies, diet and conditions.",
        ),
        description="Rules the assistant must follow",
    )


class ChatModelConfig(BaseModel):
    """Primary conversational model (any OpenAI-compatible endpoint)."""

    base_url: str = Field(
        default="https://api.deepseek.com",
        description="OpenAI-compatible API base URL",
    )
    model: str = Field(default="deepseek-chat", description="Chat model name")
    api_key_env: str = Field(
        default="DEEPSEEK_API_KEY",
        description="Environment variable name containing the bearer token",
    )
    temperature: float = Field(default=0.7, description="Sampling temperature", ge=0.0, le=2.0)
    timeout: int | None = Field(
        default=None,
        description="Request timeout in seconds (None = wait indefinitely)",
        ge=1,
    )


class ExtractionModelConfig(BaseModel):
    """Secondary model used in the background to extract user facts."""

    enabled: bool = Field(default=True, description="Enable background fact extraction")
    base_url: str = Field(
        default="https://generativelanguage.googleapis.com",
        description="Gemini API base URL",
    )
    model: str = Field(default="gemini-1.5-flash", description="Extraction model name")
    api_key_env: str = Field(
        default="GEMINI_API_KEY",
        description="Environment variable name containing the API key",
    )
    timeout: int | None = Field(
        default=None,
        description="Request timeout in seconds (None = wait indefinitely)",
        ge=1,
    )


class MemoryConfig(BaseModel):
    """Conversation and fact storage configuration."""

    storage_path: str = Field(
        default="~/.vitalis/vitalis.db",
        description="Path to SQLite database",
    )
    history_limit: int = Field(
        default=5,
        description="Number of recent turns included in each prompt",
        ge=1,
        le=100,
    )
    drain_timeout: float = Field(
        default=5.0,
        description="Seconds to wait for pending fact extractions on shutdown",
        ge=0.0,
    )


class PersonaConfig(BaseModel):
    """Where to find the persona document."""

    path: str | None = Field(
        default=None,
        description="Path to persona JSON/YAML file (None = built-in persona)",
    )


class ServerConfig(BaseModel):
    """API server configuration."""

    host: str = Field(default="127.0.0.1", description="Server bind address")
    port: int = Field(default=3000, description="Server port", ge=1, le=65535)
    cors_origins: list[str] = Field(
        default=["*"],
        description="Allowed CORS origins",
    )
    log_level: Literal["debug", "info", "warning", "error"] = Field(
        default="info",
        description="Log level for the application and uvicorn",
    )


class VitalisConfig(BaseModel):
    """Root configuration schema for Vitalis."""

    server: ServerConfig = Field(default_factory=ServerConfig)
    chat: ChatModelConfig = Field(default_factory=ChatModelConfig)
    extraction: ExtractionModelConfig = Field(default_factory=ExtractionModelConfig)
    memory: MemoryConfig = Field(default_factory=MemoryConfig)
    persona: PersonaConfig = Field(default_factory=PersonaConfig)
