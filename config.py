import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file) or dict()
else:
    data = dict()


class ApplicationConfig:
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./test.db")
    API_PREFIX = data.get("API_PREFIX", "/api")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")
    ENABLE_LOGGING_MIDDLEWARE = bool(data.get("ENABLE_LOGGING_MIDDLEWARE", 1))

    # Token operations
    AIRDROP_AMOUNT = data.get("AIRDROP_AMOUNT", 100)
    AIRDROP_DESCRIPTION = data.get("AIRDROP_DESCRIPTION", "Initial airdrop tokens")
    TRANSFER_DEFAULT_DESCRIPTION = data.get("TRANSFER_DEFAULT_DESCRIPTION", "Token transfer")
    TRANSACTIONS_DEFAULT_PAGE_SIZE = data.get("TRANSACTIONS_DEFAULT_PAGE_SIZE", 20)
    TRANSACTIONS_MAX_PAGE_SIZE = data.get("TRANSACTIONS_MAX_PAGE_SIZE", 100)
    LEDGER_LOCK_TIMEOUT_SECONDS = data.get("LEDGER_LOCK_TIMEOUT_SECONDS", 10.0)  # None waits forever

    # Ledger Reconciliation
    RECONCILIATION_ENABLED = bool(data.get("RECONCILIATION_ENABLED", True))
    RECONCILIATION_INTERVAL_SECONDS = data.get("RECONCILIATION_INTERVAL_SECONDS", 86400)  # Daily
    RECONCILIATION_AUTO_REPAIR = bool(data.get("RECONCILIATION_AUTO_REPAIR", False))
    RECONCILIATION_ALERT_WEBHOOK = data.get("RECONCILIATION_ALERT_WEBHOOK", None)
