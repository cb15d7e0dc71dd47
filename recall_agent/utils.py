"""
Utility functions for logging setup, secret redaction and display formatting.
"""

import re
import sys
from typing import Any, Dict, Optional, Union

from loguru import logger

from .config import Settings, settings as default_settings


def setup_logging(config: Optional[Settings] = None) -> None:
    """
    Setup structured logging with Loguru.

    Configures console output plus a rotating file sink based on settings.
    """
    config = config or default_settings

    # Remove default handler
    logger.remove()

    logger.add(
        sys.stderr,
        level=config.log_level,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
               "<level>{level: <8}</level> | "
               "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
               "<level>{message}</level>",
        colorize=True
    )

    if config.log_file:
        logger.add(
            config.log_file,
            level=config.log_level,
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}",
            rotation=config.log_rotation,
            retention=config.log_retention,
            compression="gz",
            serialize=False
        )

    logger.debug("Logging configured")


_SECRET_KEYS = {
    "api_key", "apikey", "secret_key", "password", "token", "auth", "authorization",
    "recall_api_key", "openrouter_api_key",
}

_SECRET_PATTERNS = [
    (r'("api_?key":\s*")[^"]+(")', r'\1***REDACTED***\2'),
    (r'("password":\s*")[^"]+(")', r'\1***REDACTED***\2'),
    (r'(Bearer\s+)[A-Za-z0-9\-._~+/]+=*', r'\1***REDACTED***'),
]


def redact_secrets(data: Union[Dict[str, Any], str]) -> Union[Dict[str, Any], str]:
    """
    Redact sensitive information from data for logging.

    Args:
        data: Dictionary or string to redact

    Returns:
        Data with secrets redacted
    """
    if isinstance(data, str):
        result = data
        for pattern, replacement in _SECRET_PATTERNS:
            result = re.sub(pattern, replacement, result, flags=re.IGNORECASE)
        return result

    if isinstance(data, dict):
        redacted = {}
        for key, value in data.items():
            if str(key).lower() in _SECRET_KEYS:
                redacted[key] = "***REDACTED***"
            elif isinstance(value, (dict, str)):
                redacted[key] = redact_secrets(value)
            else:
                redacted[key] = value
        return redacted

    return data


def format_currency(amount: float, currency: str = "USD") -> str:
    """Format a currency amount for display."""
    if currency == "USD":
        if abs(amount) >= 1_000_000:
            return f"${amount/1_000_000:.2f}M"
        elif abs(amount) >= 1_000:
            return f"${amount/1_000:.1f}K"
        return f"${amount:.2f}"
    return f"{amount:.2f} {currency}"


def shorten_address(address: str, chars: int = 4) -> str:
    """0xC02aaA39...56Cc2 style abbreviation for tables."""
    if len(address) <= chars * 2 + 5:
        return address
    prefix = 2 if address.startswith("0x") else 0
    return f"{address[:prefix + chars]}...{address[-chars:]}"
