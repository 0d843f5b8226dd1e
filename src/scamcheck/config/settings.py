from decimal import Decimal
import os
from dotenv import load_dotenv
load_dotenv()
# ---- Logging ----
LOG_LEVEL = os.environ.get("SCAMCHECK_LOG_LEVEL", "INFO")

# ---- JSON-RPC node (Erigon / Otterscan) ----
RPC_URL = os.environ.get("SCAMCHECK_RPC_URL")
RPC_TIMEOUT_SEC = int(os.environ.get("SCAMCHECK_RPC_TIMEOUT_SEC", "30"))
RPC_MAX_RETRIES = int(os.environ.get("SCAMCHECK_RPC_MAX_RETRIES", "3"))
RPC_REQUESTS_PER_SEC = float(os.environ.get("SCAMCHECK_RPC_REQUESTS_PER_SEC", "10"))
RPC_PAGE_SIZE = int(os.environ.get("SCAMCHECK_RPC_PAGE_SIZE", "20"))  # ots_searchTransactionsBefore caps at 25
RPC_MAX_TRANSACTIONS = int(os.environ.get("SCAMCHECK_RPC_MAX_TRANSACTIONS", "1000"))

# ---- Event topics / storage slots ----
TRANSFER_TOPIC = "0xddf252ad1be2c89b69c2b068fc378daa952ba7f163c4a11628f55a4df523b3ef"
APPROVAL_TOPIC = "0x8c5be1e5ebec7d5bd14f71427d1e84f3dd0314c0f7b2291e5b200ac8c7c3b925"
EIP1967_IMPLEMENTATION_SLOT = "0x360894a13ba1a3210667c828492db98dca3e2076cc3735a920a3ca505d382bbc"

# ---- Analyzer limits ----
MAX_CONTRACTS_TO_VERIFY = 20
MAX_RECEIPTS_TO_VERIFY = 80
SHORT_BYTECODE_HEX_CHARS = 130
APPROVAL_DRAIN_WINDOW_SEC = 15 * 60
APPROVAL_DRAIN_MIN_ETH = Decimal("0.5")

# Selectors seen in drainer / fee-on-transfer swap abuse. Lowercase, 0x + 8 hex.
HIGH_RISK_SELECTORS = {
    "0xb6f9de95",  # swapExactETHForTokensSupportingFeeOnTransferTokens
}

# ---- Heuristic thresholds ----
RAPID_DUMP_MIN_TXS = 5          # strictly more than this
RAPID_DUMP_WINDOW_SEC = 10 * 60
FAKE_APPROVAL_MIN_CALLS = 2     # strictly more than this
CONCENTRATION_MIN_COUNTERPARTIES = 6
CONCENTRATION_RATIO = Decimal("0.60")
NEW_WALLET_DAYS = 7
HIGH_VALUE_ETH = Decimal("10")
FAILED_SPIKE_RATIO = Decimal("0.40")
FAILED_SPIKE_MIN_TXS = 6

# ---- Deep analysis ----
OWN_SCORE_WEIGHT = Decimal("0.4")
COUNTERPARTY_SCORE_WEIGHT = Decimal("0.6")

# ---- Wallet graph defaults (clamped again by the service) ----
GRAPH_DEFAULT_DEPTH = 2
GRAPH_DEFAULT_MAX_NODES = 500
GRAPH_DEFAULT_MAX_EDGES = 1500
GRAPH_DEFAULT_LOOKBACK_DAYS = 7
