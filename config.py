import os
import sys

from dotenv import load_dotenv

from enums.runtime_environment import RuntimeEnvironment

# Load .env but don't override existing environment variables
# This allows test scripts to set RUNTIME_ENVIRONMENT=TEST before import
load_dotenv(".env", override=False)

# Parse RUNTIME_ENVIRONMENT with clear error message on misconfiguration
try:
    _runtime_env_str = os.environ.get("RUNTIME_ENVIRONMENT", RuntimeEnvironment.DEV.value)
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
WEBAPP_PORT = int(os.environ.get("WEBAPP_PORT")) if os.environ.get("WEBAPP_PORT") else 3000

# Database
DB_NAME = os.environ.get("DB_NAME", "shop.db")
DB_URL = os.environ.get("DB_URL", f"sqlite+aiosqlite:///data/{DB_NAME}")

SHOP_LANGUAGE = os.environ.get("SHOP_LANGUAGE", "vi")  # Default to Vietnamese
CURRENCY = os.environ.get("CURRENCY", "VND")

# Login Attempt Guard (per account)
LOGIN_MAX_ATTEMPTS = int(os.environ.get("LOGIN_MAX_ATTEMPTS", "5"))
LOGIN_LOCK_HOURS = int(os.environ.get("LOGIN_LOCK_HOURS", "24"))

# Login Rate Limiting (per IP + submitted identifier)
LOGIN_RATE_LIMIT_MAX_ATTEMPTS = int(os.environ.get("LOGIN_RATE_LIMIT_MAX_ATTEMPTS", "10"))
LOGIN_RATE_LIMIT_WINDOW_SECONDS = int(os.environ.get("LOGIN_RATE_LIMIT_WINDOW_SECONDS", str(15 * 60)))
# "memory" keeps the window process-local, "redis" shares it across instances
LOGIN_RATE_LIMIT_BACKEND = os.environ.get("LOGIN_RATE_LIMIT_BACKEND", "memory")
REDIS_HOST = os.environ.get("REDIS_HOST", "localhost")
REDIS_PASSWORD = os.environ.get("REDIS_PASSWORD")

# Promotions
PROMO_DISCOUNT_PERCENT = int(os.environ.get("PROMO_DISCOUNT_PERCENT", "15"))
WEEKEND_MILK_TEA_PRICE = int(os.environ.get("WEEKEND_MILK_TEA_PRICE", "20000"))

# Logging Configuration
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")  # DEBUG, INFO, WARNING, ERROR, CRITICAL
LOG_MASK_SECRETS = os.environ.get("LOG_MASK_SECRETS", "true") == "true"  # Mask sensitive data in logs

# Log Retention: Environment-specific defaults
# Dev: keep a month of logs for debugging
# Prod: Use 5 days default to save disk space
if RUNTIME_ENVIRONMENT == RuntimeEnvironment.DEV:
    LOG_RETENTION_DAYS = int(os.environ.get("LOG_RETENTION_DAYS", "30"))
else:
    LOG_RETENTION_DAYS = int(os.environ.get("LOG_RETENTION_DAYS", "5"))

# Login/Audit log retention (database records, not log files)
LOGIN_LOG_RETENTION_DAYS = int(os.environ.get("LOGIN_LOG_RETENTION_DAYS", "30"))
AUDIT_LOG_RETENTION_DAYS = int(os.environ.get("AUDIT_LOG_RETENTION_DAYS", "90"))
LOG_CLEANUP_INTERVAL_HOURS = int(os.environ.get("LOG_CLEANUP_INTERVAL_HOURS", "24"))
