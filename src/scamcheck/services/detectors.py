"""
Heuristic detectors.

Pure functions over an already-fetched batch of transactions. No I/O.
"""
from __future__ import annotations

import time
from collections import Counter
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional, Sequence

from scamcheck.config import settings
from scamcheck.core.dto import TransactionRecord
from scamcheck.core.enums import Confidence, IndicatorKind, Severity, TxStatus
from scamcheck.core.models import ScamIndicator


def _short(tx_hash: str) -> str:
    return tx_hash[:10]


def _is_unverified_contract_call(tx: TransactionRecord) -> bool:
    return tx.is_contract_interaction and tx.contract_name is None


# -------------------------
# Per-transaction checks
# -------------------------

def transaction_indicators(transactions: Sequence[TransactionRecord]) -> List[ScamIndicator]:
    out: List[ScamIndicator] = []
    for tx in transactions:
        if _is_unverified_contract_call(tx):
            out.append(ScamIndicator(
                IndicatorKind.UNVERIFIED_CONTRACT,
                f"Interaction with unverified contract at {tx.to_address}",
                Severity.WARNING,
                evidence=(tx.tx_hash, tx.to_address),
            ))

        if tx.value_eth == 0 and not tx.is_contract_interaction:
            out.append(ScamIndicator(
                IndicatorKind.ZERO_VALUE_TRANSFER,
                f"Zero-value ETH transfer in tx {_short(tx.tx_hash)}...",
                Severity.INFO,
                evidence=(tx.tx_hash,),
            ))
    return out


# -------------------------
# Batch patterns
# -------------------------

def detect_patterns(transactions: Sequence[TransactionRecord]) -> List[ScamIndicator]:
    if not transactions:
        return []

    out: List[ScamIndicator] = []

    # rapid token dump
    token_txs = [t for t in transactions if t.has_token]
    if len(token_txs) > settings.RAPID_DUMP_MIN_TXS:
        span = max(t.timestamp for t in token_txs) - min(t.timestamp for t in token_txs)
        if span < settings.RAPID_DUMP_WINDOW_SEC:
            out.append(ScamIndicator(
                IndicatorKind.RAPID_TOKEN_DUMP,
                f"{len(token_txs)} token transfers in under 10 minutes, possible dump pattern",
                Severity.HIGH,
            ))

    # honeypot: a token seen on exactly one transaction
    symbol_counts = Counter(t.token_symbol for t in transactions if t.token_symbol)
    seen = set()
    for t in token_txs:
        symbol = t.token_symbol
        if not symbol or symbol in seen:
            continue
        seen.add(symbol)
        if symbol_counts[symbol] == 1:
            out.append(ScamIndicator(
                IndicatorKind.HONEYPOT_TOKEN,
                f"Token {symbol} received but no out-transfer detected, possible honeypot",
                Severity.WARNING,
                evidence=(t.tx_hash,),
            ))

    # fake approval: zero-value calls into unverified contracts
    approvals = [t for t in transactions if _is_unverified_contract_call(t) and t.value_eth == 0]
    if len(approvals) > settings.FAKE_APPROVAL_MIN_CALLS:
        out.append(ScamIndicator(
            IndicatorKind.FAKE_APPROVAL,
            f"{len(approvals)} approval-like calls to unverified contracts",
            Severity.CRITICAL,
            Confidence.MEDIUM,
            tuple(t.tx_hash for t in approvals[:3]),
        ))

    return out


# -------------------------
# Wallet-only heuristics
# -------------------------

def detect_wallet_heuristics(
    wallet: str,
    transactions: Sequence[TransactionRecord],
    now_ts: Optional[int] = None,
) -> List[ScamIndicator]:
    if not transactions:
        return []

    subject = wallet.lower()
    now = now_ts if now_ts is not None else int(time.time())
    out: List[ScamIndicator] = []

    counterparties = []
    for t in transactions:
        other = t.to_address if t.from_address.lower() == subject else t.from_address
        other = (other or "").strip().lower()
        if other and other != subject:
            counterparties.append(other)

    freq = Counter(counterparties)
    if len(freq) >= settings.CONCENTRATION_MIN_COUNTERPARTIES:
        top3 = sum(c for _, c in freq.most_common(3))
        ratio = Decimal(top3) / Decimal(len(counterparties))
        if ratio > settings.CONCENTRATION_RATIO:
            out.append(ScamIndicator(
                IndicatorKind.COUNTERPARTY_CONCENTRATION,
                f"Top counterparties concentrate {float(ratio):.0%} of activity.",
                Severity.WARNING,
                Confidence.MEDIUM,
                tuple(a for a, _ in freq.most_common(3)),
            ))

    first_seen = min(t.timestamp for t in transactions)
    high_value = any(t.value_eth >= settings.HIGH_VALUE_ETH for t in transactions)
    if now - first_seen <= settings.NEW_WALLET_DAYS * 86400 and high_value:
        out.append(ScamIndicator(
            IndicatorKind.WALLET_AGE_ANOMALY,
            "Very new wallet with high-value transfers.",
            Severity.WARNING,
            Confidence.MEDIUM,
            (datetime.fromtimestamp(first_seen, tz=timezone.utc).isoformat(),),
        ))

    failed = sum(1 for t in transactions if t.status == TxStatus.FAILED)
    failed_ratio = Decimal(failed) / Decimal(len(transactions))
    if failed_ratio > settings.FAILED_SPIKE_RATIO and len(transactions) >= settings.FAILED_SPIKE_MIN_TXS:
        out.append(ScamIndicator(
            IndicatorKind.FAILED_TX_SPIKE,
            f"High failed transaction ratio detected ({float(failed_ratio):.0%}).",
            Severity.INFO,
            Confidence.LOW,
        ))

    return out
