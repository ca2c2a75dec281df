from pathlib import Path
from dotenv import dotenv_values
from pydantic import Field
from pydantic_settings import BaseSettings

import os

# Explicitly load .env for local/dev environments only if values are missing from the environment
BASE_DIR = Path(__file__).resolve().parent.parent.parent
env_file = BASE_DIR / ".env"

if env_file.exists():
    file_env = dotenv_values(env_file)
    missing_keys = {k: v for k, v in file_env.items() if k not in os.environ and v is not None}
    for k, v in missing_keys.items():
        os.environ[k] = v


class Settings(BaseSettings):
    """Application settings pulled from environment variables."""

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="json", description="Logging format (e.g., plain, json)")

    # Island Generation Configuration
    working_grid_size: int = Field(default=64, description="Side length the cellular automaton runs at")
    reference_resolution: int = Field(default=512, description="Resolution the shore radius is tuned for")
    floor_step: float = Field(default=0.001, description="Decrement used when resetting the sea floor")
    default_resolution: int = Field(default=513, description="Heightmap resolution used by the CLI")

    # Output Configuration
    output_dir: str = Field(default="./output", description="Directory for generated heightmaps")

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
