# config.py
# Configuration

# Eligibility API
API_BASE_URL = "https://event-api.mindnetwork.xyz"
API_VERSION = "0.1.0"
API_AUTHORITY = "event-api.mindnetwork.xyz"
API_ORIGIN = "https://agent.mindnetwork.xyz"
API_REFERER = "https://agent.mindnetwork.xyz/"

# Message signed by every wallet before the eligibility request
SIGN_MESSAGE = "Sign to check the amount of FHE this wallet is eligible to claim."

# Eligibility request attempts per wallet
ELIGIBILITY_MAX_ATTEMPTS = 5

# Request timeout in seconds for claim runs (check runs send no timeout)
CLAIM_REQUEST_TIMEOUT_SEC = 15

# Number of concurrent wallets per mode
CLAIM_CONCURRENCY = 2
CHECK_CONCURRENCY = 20

# Delay between initial wallet starts in seconds (smooth start)
SLEEP_BETWEEN_WALLETS_SEC = 2

# Random cool-down after each wallet, seconds (min, max)
COOLDOWN_RANGE_SEC = (3, 7)

# Token decimals used for amount formatting
TOKEN_DECIMALS = 18
TOKEN_SYMBOL = "FHE"

# Claim contract
CLAIM_CONTRACT_ADDRESS = "0xbdDE97f2B7cd2Ed7D4F3BB7D88E674cd9164B787"
CLAIM_GAS_LIMIT = 160000
CLAIM_GAS_PRICE_GWEI = "1.02"

# Number of RPC retry attempts (per RPC entry)
RPC_TRY = 3

# List of RPC endpoints (BNB Smart Chain)
RPC_LIST = [
    "https://bsc-dataseed.bnbchain.org",
    "https://bsc-dataseed1.defibit.io",
    "https://bsc.drpc.org",
]

# Chain ID used for RPC validation
CHAIN_ID = 56

# Transaction receipt timeout in seconds
TX_TIMEOUT = 120

# Use proxies from the wallet file (True/False)
USE_PROXY = True

# Input and output files
WALLETS_PATH = "wallet.csv"
CLAIM_RESULTS_PATH = "claim_results.csv"
CHECK_RESULTS_PATH = "results.csv"

# Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
LOG_LEVEL = "INFO"

# Log file path (None disables file logging)
LOG_FILE = "claim_log.txt"
