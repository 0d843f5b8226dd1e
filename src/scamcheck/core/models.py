from __future__ import annotations

import re
import time
from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Optional, Tuple

from scamcheck.core.dto import TransactionRecord
from scamcheck.core.enums import (
    AnalysisStage,
    Confidence,
    GraphDirection,
    IndicatorKind,
    InputType,
    Severity,
    Verdict,
)


_WALLET_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")
_TX_HASH_RE = re.compile(r"^0x[0-9a-fA-F]{64}$")


def is_wallet_address(value: Optional[str]) -> bool:
    return bool(value) and _WALLET_RE.fullmatch(value) is not None


def is_transaction_hash(value: Optional[str]) -> bool:
    return bool(value) and _TX_HASH_RE.fullmatch(value) is not None


def _clamp(value: int, lo: int, hi: int) -> int:
    return max(lo, min(hi, int(value)))


# Analysis models

@dataclass(frozen=True)
class AnalysisRequest:
    """
    Raw user input, classified once at construction.
    """

    input: str
    input_type: InputType = field(init=False)

    def __post_init__(self) -> None:
        raw = (self.input or "").strip()
        object.__setattr__(self, "input", raw)
        if is_wallet_address(raw):
            kind = InputType.WALLET_ADDRESS
        elif is_transaction_hash(raw):
            kind = InputType.TRANSACTION_HASH
        else:
            kind = InputType.UNKNOWN
        object.__setattr__(self, "input_type", kind)


@dataclass(frozen=True)
class ScamIndicator:
    kind: IndicatorKind
    description: str
    severity: Severity
    confidence: Confidence = Confidence.MEDIUM
    evidence: Tuple[str, ...] = ()


@dataclass(frozen=True)
class AnalysisResult:
    analysis_id: str
    input: str
    input_type: InputType
    verdict: Verdict
    risk_score: int
    summary: str
    transactions: Tuple[TransactionRecord, ...]
    indicators: Tuple[ScamIndicator, ...]
    analyzed_at: int


@dataclass(frozen=True)
class CounterpartyRisk:
    analysis_id: str
    address: str
    risk_score: int
    verdict: Verdict
    transaction_count: int
    combined_score: int


@dataclass(frozen=True)
class ProgressEvent:
    analysis_id: str
    stage: AnalysisStage
    message: str
    percent: int
    result: Optional[AnalysisResult] = None
    counterparty: Optional[CounterpartyRisk] = None
    combined_score: Optional[int] = None



# Graph models

@dataclass(frozen=True)
class WalletGraphQuery:
    root: str
    depth: int = 2
    direction: GraphDirection = GraphDirection.BOTH
    min_value_eth: Decimal = Decimal("0")
    max_nodes: int = 500
    max_edges: int = 1500
    lookback_days: int = 7

    # fixes "now" for the lookback window; None = wall clock
    now_ts: Optional[int] = None

    def bounded(self) -> "WalletGraphQuery":
        return replace(
            self,
            root=self.root.strip().lower(),
            depth=_clamp(self.depth, 1, 10),
            max_nodes=_clamp(self.max_nodes, 10, 5000),
            max_edges=_clamp(self.max_edges, 10, 10000),
            lookback_days=_clamp(self.lookback_days, 1, 3650),
            min_value_eth=Decimal(str(self.min_value_eth)),
        )

    def window_start(self) -> int:
        now = self.now_ts if self.now_ts is not None else int(time.time())
        return now - int(self.lookback_days) * 24 * 3600


@dataclass(frozen=True)
class GraphNode:
    address: str
    label: str
    is_seed: bool
    is_contract: bool
    inbound_count: int
    outbound_count: int
    total_in_eth: Decimal
    total_out_eth: Decimal


@dataclass(frozen=True)
class GraphEdge:
    id: str
    from_address: str
    to_address: str
    total_value_eth: Decimal
    transaction_count: int
    first_seen: int
    last_seen: int
    dominant_token: str


@dataclass(frozen=True)
class GraphResult:
    root: str
    depth: int
    direction: GraphDirection
    nodes: Tuple[GraphNode, ...] = ()
    edges: Tuple[GraphEdge, ...] = ()

    @property
    def node_count(self) -> int:
        return len(self.nodes)

    @property
    def edge_count(self) -> int:
        return len(self.edges)
