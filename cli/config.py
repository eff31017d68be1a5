"""Configuration and token storage for the CLI client."""

import os
from pathlib import Path

# Configuration
API_URL = os.getenv("JHONOTE_API_URL", "http://localhost:8000")
TOKEN_FILE = Path.home() / ".jhonote" / "token"
REQUEST_TIMEOUT = 10.0


def save_token(token: str):
    """Save JWT token to local file."""
    TOKEN_FILE.parent.mkdir(parents=True, exist_ok=True)
    TOKEN_FILE.write_text(token)


def load_token() -> str | None:
    """Load JWT token from local file."""
    if TOKEN_FILE.exists():
        return TOKEN_FILE.read_text().strip()
    return None


def delete_token():
    """Delete JWT token file."""
    if TOKEN_FILE.exists():
        TOKEN_FILE.unlink()
