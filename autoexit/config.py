import os

from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./autoexit.db")

REDIS_URL = os.getenv("REDIS_URL", "redis://redis:6379/0")

# CELERY CONFIGURATION
CELERY_BROKER_URL = os.getenv("CELERY_BROKER_URL", REDIS_URL)
CELERY_RESULT_BACKEND = os.getenv("CELERY_RESULT_BACKEND", REDIS_URL)
MONITOR_INTERVAL = float(os.getenv("MONITOR_INTERVAL", "30"))
MONITOR_EXECUTE_EXITS = os.getenv("MONITOR_EXECUTE_EXITS", "False").lower() == "true"

# AUTH SERVICE CONFIGURATION
AUTH_URL = os.getenv("AUTH_URL", "")
AUTH_SERVICE_KEY = os.getenv("AUTH_SERVICE_KEY", "")

# SOLANA CONFIGURATION
SOLANA_RPC_URL = os.getenv("SOLANA_RPC_URL", "https://api.mainnet-beta.solana.com")

# deadline applied to every outbound HTTP / RPC call, in seconds
REQUEST_TIMEOUT = float(os.getenv("REQUEST_TIMEOUT", "10"))

EXIT_SLIPPAGE = float(os.getenv("EXIT_SLIPPAGE", "10"))
EXIT_LOCK_TTL = int(os.getenv("EXIT_LOCK_TTL", "60"))
PRIORITY_FEE_COOLDOWN = float(os.getenv("PRIORITY_FEE_COOLDOWN", "30"))
