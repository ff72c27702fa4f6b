"""
Application configuration using Pydantic Settings.
"""

import os
from functools import lru_cache
from pydantic_settings import BaseSettings

from tvmcalc.calculations.rate import (
    DEFAULT_GUESS,
    MAX_ITERATIONS,
    TOLERANCE,
    SolverConfig,
)


def get_env_file() -> str:
    """Determine which env file to use based on environment."""
    env = os.getenv("APP_ENV", "development")
    if env == "production":
        return ".env.production"
    return ".env.development"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # App settings
    app_name: str = "TVM Calculator"
    debug: bool = False
    log_level: str = "INFO"
    app_env: str = "development"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # Calculator defaults
    periods_per_year: int = 12

    # Rate solver
    solver_initial_guess: float = DEFAULT_GUESS
    solver_max_iterations: int = MAX_ITERATIONS
    solver_tolerance: float = TOLERANCE

    class Config:
        env_file = get_env_file()
        env_file_encoding = "utf-8"
        extra = "ignore"

    def solver_config(self) -> SolverConfig:
        """Build the rate solver configuration from settings."""
        return SolverConfig(
            initial_guess=self.solver_initial_guess,
            max_iterations=self.solver_max_iterations,
            tolerance=self.solver_tolerance,
        )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
