"""
Credential resolution for the Coolify API.

Priority for both the token and the API URL:
  1. CLI flag
  2. COOLIFY_TOKEN / COOLIFY_API_URL environment variable
  3. Config file value
  4. Interactive prompt (TTY only)
"""

import os
import sys
from typing import List, Optional, Tuple

from rich.prompt import Prompt

TOKEN_ENV = "COOLIFY_TOKEN"
API_URL_ENV = "COOLIFY_API_URL"


def _interactive() -> bool:
    return sys.stdin is not None and sys.stdin.isatty()


def prompt_for_token() -> str:
    return Prompt.ask("Enter your Coolify API token", password=True).strip()


def prompt_for_api_url() -> str:
    return Prompt.ask("Enter your Coolify API URL (e.g., https://coolify.example.com)").strip()


def resolve_token(cli_token: Optional[str] = None, config_token: Optional[str] = None,
                  prompt: bool = True) -> Optional[str]:
    if cli_token:
        return cli_token
    env_token = os.environ.get(TOKEN_ENV)
    if env_token:
        return env_token
    if config_token:
        return config_token
    if prompt and _interactive():
        return prompt_for_token() or None
    return None


def resolve_api_url(cli_api_url: Optional[str] = None, config_api_url: Optional[str] = None,
                    prompt: bool = True) -> Optional[str]:
    if cli_api_url:
        return cli_api_url
    env_url = os.environ.get(API_URL_ENV)
    if env_url:
        return env_url
    if config_api_url:
        return config_api_url
    if prompt and _interactive():
        return prompt_for_api_url() or None
    return None


def validate_credentials(api_url: Optional[str], token: Optional[str]) -> Tuple[bool, List[str]]:
    errors: List[str] = []
    if not api_url:
        errors.append(
            "Missing Coolify API URL. Provide via --api-url flag, COOLIFY_API_URL env var, or config file."
        )
    if not token:
        errors.append(
            "Missing Coolify API token. Provide via --token flag, COOLIFY_TOKEN env var, or config file."
        )
    return not errors, errors
