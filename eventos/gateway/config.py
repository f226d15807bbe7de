"""
Environment configuration for the gateway.

Values come from the process environment, with a .env file in the working
directory loaded first. create_app() copies them into app.config, where
tests can override any key.
"""

import os
from typing import Any, Dict

from dotenv import load_dotenv


def load_config() -> Dict[str, Any]:
    """Read every setting the app understands from the environment."""
    load_dotenv()

    return {
        # Token secrets have no default: token issuance refuses to start without them.
        "ACCESS_TOKEN_SECRET": os.getenv("ACCESS_TOKEN_SECRET"),
        "REFRESH_TOKEN_SECRET": os.getenv("REFRESH_TOKEN_SECRET"),
        "ACCESS_TOKEN_EXPIRES_MINUTES": int(os.getenv("ACCESS_TOKEN_EXPIRES_MINUTES", 60)),
        "REFRESH_TOKEN_EXPIRES_DAYS": int(os.getenv("REFRESH_TOKEN_EXPIRES_DAYS", 7)),
        "DATABASE_URL": os.getenv("DATABASE_URL", "sqlite:///eventos.db"),
        "PORT": int(os.getenv("PORT", 3000)),
        "CORS_ORIGINS": os.getenv("CORS_ORIGINS", "*"),
        "LOG_LEVEL": os.getenv("LOG_LEVEL", "INFO"),
    }
