from autoexit.schemas.priority_fee import FeeSchedule, FeeTier

# ----------------------------- SOLANA CONSTANTS -------------------------------
# Public RPCs tried after the configured primary when it fails or rate limits
FALLBACK_RPCS = (
    "https://api.mainnet-beta.solana.com",
    "https://solana-mainnet.g.alchemy.com/v2/demo",
    "https://rpc.ankr.com/solana",
    "https://solana.public-rpc.com",
)

RPC_RATE_LIMIT_CODE = -32429
RPC_RATE_LIMIT_MESSAGE = "max usage"

LAMPORTS_PER_SOL = 1_000_000_000
MICRO_LAMPORTS_PER_LAMPORT = 1_000_000
DEFAULT_COMPUTE_UNITS = 200_000

# ----------------------------- PRIORITY FEES ----------------------------------
# floors in microLamports per compute unit, multipliers relative to the
# percentile each tier is derived from
DEFAULT_FEE_SCHEDULE = FeeSchedule(
    low=FeeTier(floor=1_000, multiplier=0.5),
    medium=FeeTier(floor=10_000, multiplier=1.0),
    high=FeeTier(floor=100_000, multiplier=2.5),
    very_high=FeeTier(floor=500_000, multiplier=5.0),
)

# ----------------------------- API TYPES --------------------------------------
API_TYPES = (
    'dexscreener',
    'geckoterminal',
    'birdeye',
    'dextools',
    'honeypot_rugcheck',
    'liquidity_lock',
    'trade_execution',
    'rpc_provider',
)

API_STATUSES = ('active', 'inactive', 'error', 'rate_limited')

DEFAULT_API_CONFIGURATIONS = (
    ('dexscreener', 'DexScreener API', 'https://api.dexscreener.com', 300),
    ('geckoterminal', 'GeckoTerminal API', 'https://api.geckoterminal.com', 300),
    ('birdeye', 'Birdeye API', 'https://public-api.birdeye.so', 100),
    ('dextools', 'Dextools API', 'https://api.dextools.io', 60),
    ('honeypot_rugcheck', 'Honeypot/Rug-check API', 'https://api.honeypot.is', 60),
    ('liquidity_lock', 'Liquidity Lock Verification API', 'https://api.team.finance', 60),
    ('trade_execution', 'Jupiter Trade API', 'https://quote-api.jup.ag', 120),
    ('rpc_provider', 'Solana RPC', 'https://api.mainnet-beta.solana.com', 100),
)

# ----------------------------- REDIS CONSTANTS --------------------------------
ERROR_QUEUE_NAME = 'errors'
EXIT_LOCK_PREFIX = 'auto-exit-lock'
