from pydantic_settings import BaseSettings


class Config(BaseSettings):
    """Application configuration loaded from environment variables."""

    database_url: str
    host: str
    port: int
    debug: bool
    cors_origins: list[str] = []
    code_length: int = 6  # Length of generated session codes
    code_max_attempts: int = 10  # Candidates tried before giving up on a unique code
    write_max_attempts: int = 5  # Compare-and-swap retries for action list writes
    sweep_enabled: bool = True
    sweep_interval_seconds: float = 5.0
    # Whether a client-supplied action_id may repeat within one session
    reject_duplicate_action_ids: bool = False
    default_action_size: int = 48
    default_action_color: str = "#16a34a"

    model_config = {
        "env_file": [".env"],
        "env_prefix": "AGORA_",
        "extra": "ignore",
    }
