import os
import sys

from dotenv import load_dotenv

from enums.runtime_environment import RuntimeEnvironment

# Load .env but don't override existing environment variables
# This allows test scripts to set RUNTIME_ENVIRONMENT=TEST before import
load_dotenv(".env", override=False)

# Parse RUNTIME_ENVIRONMENT with clear error message on misconfiguration
try:
    _runtime_env_str = os.environ.get("RUNTIME_ENVIRONMENT")
    if not _runtime_env_str:
        raise ValueError("RUNTIME_ENVIRONMENT environment variable is not set")
    RUNTIME_ENVIRONMENT = RuntimeEnvironment(_runtime_env_str)
except ValueError as e:
    valid_values = [env.value for env in RuntimeEnvironment]
    print(f"\n ERROR: Invalid RUNTIME_ENVIRONMENT configuration\n", file=sys.stderr)
    print(f"Reason: {e}", file=sys.stderr)
    print(f"Valid values: {', '.join(valid_values)}", file=sys.stderr)
    print(f"Current value: {os.environ.get('RUNTIME_ENVIRONMENT', '(not set)')}", file=sys.stderr)
    print(f"\nAdd to .env: RUNTIME_ENVIRONMENT={valid_values[0]}\n", file=sys.stderr)
    sys.exit(1)

WEBAPP_HOST = os.environ.get("WEBAPP_HOST", "0.0.0.0")
WEBAPP_PORT = int(os.environ.get("WEBAPP_PORT", "10000"))

# Database
DB_URL = os.environ.get("DB_URL", "sqlite+aiosqlite:///data/storefront.db")

# Admin (operator) accounts - user ids allowed on /admin endpoints
try:
    _admin_id_list_str = os.environ.get("ADMIN_ID_LIST", "")
    ADMIN_ID_LIST = [int(admin_id.strip()) for admin_id in _admin_id_list_str.split(',') if admin_id.strip()]
except ValueError as e:
    print(f"\n ERROR: Invalid ADMIN_ID_LIST configuration\n", file=sys.stderr)
    print(f"Reason: {e}", file=sys.stderr)
    print(f"Expected format: comma-separated list of user IDs", file=sys.stderr)
    print(f"Example: ADMIN_ID_LIST=1,42", file=sys.stderr)
    print(f"Current value: {os.environ.get('ADMIN_ID_LIST', '(not set)')}\n", file=sys.stderr)
    sys.exit(1)

# Payment gateway webhook (HMAC-SHA256 over the raw request body)
PAYMENT_WEBHOOK_SECRET = os.environ.get("PAYMENT_WEBHOOK_SECRET")
PAYMENT_WEBHOOK_SIGNATURE_HEADER = os.environ.get("PAYMENT_WEBHOOK_SIGNATURE_HEADER", "X-Razorpay-Signature")

# Session tokens issued by the login flow and verified here
SESSION_SECRET = os.environ.get("SESSION_SECRET")
SESSION_COOKIE_NAME = os.environ.get("SESSION_COOKIE_NAME", "session")
SESSION_MAX_AGE_SECONDS = int(os.environ.get("SESSION_MAX_AGE_SECONDS", str(7 * 24 * 3600)))  # Default: 7 days

# Courier aggregator
COURIER_API_URL = os.environ.get("COURIER_API_URL", "").rstrip("/")
COURIER_API_TOKEN = os.environ.get("COURIER_API_TOKEN")
COURIER_REQUEST_TIMEOUT_SECONDS = float(os.environ.get("COURIER_REQUEST_TIMEOUT_SECONDS", "15"))
COURIER_PICKUP_LOCATION = os.environ.get("COURIER_PICKUP_LOCATION", "Primary")

# CORS allowed origins for the storefront frontends
CORS_ALLOWED_ORIGINS = os.environ.get("CORS_ALLOWED_ORIGINS", "").split(",") if os.environ.get("CORS_ALLOWED_ORIGINS") else []

# Logging Configuration
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")  # DEBUG, INFO, WARNING, ERROR, CRITICAL
LOG_MASK_SECRETS = os.environ.get("LOG_MASK_SECRETS", "true") == "true"  # Mask sensitive data in logs

# Log Retention: Environment-specific defaults
if RUNTIME_ENVIRONMENT == RuntimeEnvironment.DEV:
    LOG_RETENTION_DAYS = int(os.environ.get("LOG_RETENTION_DAYS", "30"))
else:
    LOG_RETENTION_DAYS = int(os.environ.get("LOG_RETENTION_DAYS", "5"))
