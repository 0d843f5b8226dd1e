from __future__ import annotations

from enum import Enum


class InputType(str, Enum):
    UNKNOWN = "unknown"
    WALLET_ADDRESS = "walletAddress"
    TRANSACTION_HASH = "transactionHash"


class TxStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"
    PENDING = "pending"


class IndicatorKind(str, Enum):
    UNVERIFIED_CONTRACT = "unverifiedContract"
    ZERO_VALUE_TRANSFER = "zeroValueTransfer"
    DRAINER_PATTERN = "drainerPattern"
    HONEYPOT_TOKEN = "honeypotToken"
    RAPID_TOKEN_DUMP = "rapidTokenDump"
    FAKE_APPROVAL = "fakeApproval"
    COUNTERPARTY_CONCENTRATION = "counterpartyConcentration"
    WALLET_AGE_ANOMALY = "walletAgeAnomaly"
    FAILED_TX_SPIKE = "failedTransactionSpike"
    PROXY_UPGRADEABILITY_RISK = "proxyUpgradeabilityRisk"
    APPROVAL_DRAIN_PATTERN = "approvalDrainPattern"
    MALICIOUS_BYTECODE_SIMILARITY = "maliciousBytecodeSimilarity"
    EVENT_LOG_ANOMALY = "eventLogAnomaly"
    SUSPICIOUS_SELECTOR = "suspiciousSelector"
    CLEAN = "clean"


class Severity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    HIGH = "high"
    CRITICAL = "critical"


class Confidence(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    VERIFIED = "verified"


class Verdict(str, Enum):
    CLEAN = "clean"
    SUSPICIOUS = "suspicious"
    LIKELY_SCAM = "likelyScam"
    CONFIRMED_SCAM = "confirmedScam"


class AnalysisStage(str, Enum):
    STARTED = "started"
    FETCHING_TRANSACTIONS = "fetchingTransactions"
    ANALYZING_CONTRACTS = "analyzingContracts"
    DETECTING_PATTERNS = "detectingPatterns"
    COMPUTING_SCORE = "computingScore"
    COMPLETED = "completed"
    DEEP_ANALYSIS = "deepAnalysis"
    DEEP_ANALYSIS_COMPLETE = "deepAnalysisComplete"
    FAILED = "failed"


class GraphDirection(str, Enum):
    OUTGOING = "outgoing"
    INCOMING = "incoming"
    BOTH = "both"

    @classmethod
    def parse(cls, raw: str | None) -> "GraphDirection":
        # unknown values fall back to BOTH
        if not raw:
            return cls.BOTH
        for d in cls:
            if d.value == raw.strip().lower():
                return d
        return cls.BOTH
