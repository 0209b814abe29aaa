"""
Configuration Validation Module

Validates critical configuration values at startup to fail-fast
with clear error messages instead of runtime failures.
"""

import sys
from typing import Optional

from enums.runtime_environment import RuntimeEnvironment

MIN_SECRET_LENGTH = 32


class ConfigValidationError(Exception):
    """Raised when configuration validation fails."""
    pass


def validate_webhook_secret(webhook_secret: Optional[str]) -> None:
    """
    Validate payment gateway webhook secret.

    Args:
        webhook_secret: PAYMENT_WEBHOOK_SECRET value

    Raises:
        ConfigValidationError: If secret is missing, empty, or too weak
    """
    if not webhook_secret or len(webhook_secret.strip()) == 0:
        raise ConfigValidationError(
            "PAYMENT_WEBHOOK_SECRET is required and must not be empty!\n"
            "This secret is used to verify payment webhook signatures.\n"
            "Copy it from the webhook settings of your payment gateway dashboard.\n"
            "Add to .env: PAYMENT_WEBHOOK_SECRET=<your-webhook-secret>"
        )

    if len(webhook_secret) < MIN_SECRET_LENGTH:
        raise ConfigValidationError(
            f"PAYMENT_WEBHOOK_SECRET is too weak (length: {len(webhook_secret)}, minimum: {MIN_SECRET_LENGTH})!\n"
            "Payment webhook signatures require strong secrets to prevent HMAC bypass."
        )


def validate_session_secret(session_secret: Optional[str]) -> None:
    """
    Validate session token signing secret.

    Args:
        session_secret: SESSION_SECRET value

    Raises:
        ConfigValidationError: If secret is missing or too weak
    """
    if not session_secret:
        raise ConfigValidationError(
            "SESSION_SECRET is required for session token verification!\n"
            "Generate a secure secret with: openssl rand -hex 32\n"
            "Add to .env: SESSION_SECRET=<your-generated-secret>"
        )

    if len(session_secret) < MIN_SECRET_LENGTH:
        raise ConfigValidationError(
            f"SESSION_SECRET must be at least {MIN_SECRET_LENGTH} characters long (currently: {len(session_secret)})\n"
            "Generate a secure secret with: openssl rand -hex 32"
        )


def validate_required_config(value: Optional[str], name: str, example: str = "") -> None:
    """
    Validate that a required config value is set.

    Args:
        value: The config value to check
        name: Name of the config variable
        example: Optional example value to show in error message

    Raises:
        ConfigValidationError: If value is missing
    """
    if not value:
        error_msg = f"{name} is required but not set!"
        if example:
            error_msg += f"\nAdd to .env: {name}={example}"
        raise ConfigValidationError(error_msg)


def validate_startup_config(config_module) -> None:
    """
    Validate all critical configuration at startup.

    Args:
        config_module: The config module to validate

    Raises:
        ConfigValidationError: If any validation fails
    """
    validate_webhook_secret(getattr(config_module, 'PAYMENT_WEBHOOK_SECRET', None))
    validate_session_secret(getattr(config_module, 'SESSION_SECRET', None))

    # Tests run against an in-process fake aggregator
    if config_module.RUNTIME_ENVIRONMENT != RuntimeEnvironment.TEST:
        validate_required_config(
            getattr(config_module, 'COURIER_API_URL', None),
            'COURIER_API_URL',
            'https://apiv2.shiprocket.in/v1/external'
        )
        validate_required_config(
            getattr(config_module, 'COURIER_API_TOKEN', None),
            'COURIER_API_TOKEN',
            '<your-courier-api-token>'
        )


def validate_or_exit(config_module) -> None:
    """
    Validate configuration and exit with error code 1 if validation fails.

    This is the main entry point for startup validation.

    Args:
        config_module: The config module to validate
    """
    try:
        validate_startup_config(config_module)
    except ConfigValidationError as e:
        print(f"\n ERROR: Configuration Validation Failed\n", file=sys.stderr)
        print(str(e), file=sys.stderr)
        print("\nServer startup aborted. Please fix configuration and try again.\n", file=sys.stderr)
        sys.exit(1)
