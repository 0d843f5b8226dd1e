from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from scamcheck.config import settings
from scamcheck.core.cancellation import CancellationToken, check
from scamcheck.core.dto import TransactionRecord
from scamcheck.core.enums import Confidence, IndicatorKind, Severity, TxStatus
from scamcheck.core.models import ScamIndicator
from scamcheck.ports.chain_data_port import ChainDataPort


logger = logging.getLogger(__name__)

_EMPTY_CODE = ("", "0x", "0x0")


def _strip_0x(value: str) -> str:
    return value[2:] if value[:2].lower() == "0x" else value


def implementation_from_slot(slot_value: Optional[str]) -> Optional[str]:
    """
    Decode an EIP-1967 implementation slot into an address.

    Returns None unless the word holds a non-zero, right-aligned 20-byte value.
    """
    if not slot_value:
        return None
    word = _strip_0x(slot_value.strip()).lower()
    if len(word) < 40:
        return None
    head, tail = word[:-40], word[-40:]
    if head.strip("0") or not tail.strip("0"):
        return None
    return "0x" + tail


def has_code(bytecode: Optional[str]) -> bool:
    return bytecode is not None and bytecode.strip().lower() not in _EMPTY_CODE


class OnChainVerifier:
    """
    Detectors that confirm facts on chain through further Data Port lookups.

    Lookup failures for a single contract or receipt are logged and skipped.
    """

    def __init__(
        self,
        chain: ChainDataPort,
        max_contracts: int = settings.MAX_CONTRACTS_TO_VERIFY,
        max_receipts: int = settings.MAX_RECEIPTS_TO_VERIFY,
    ) -> None:
        self.chain = chain
        self.max_contracts = max_contracts
        self.max_receipts = max_receipts

    def verify(
        self,
        transactions: Sequence[TransactionRecord],
        wallet: Optional[str] = None,
        cancel: Optional[CancellationToken] = None,
    ) -> List[ScamIndicator]:
        out: List[ScamIndicator] = []
        out.extend(self.check_contracts(transactions, cancel))
        out.extend(self.check_receipts(transactions, wallet, cancel))
        return out

    # -------------------------
    # Contract bytecode / storage
    # -------------------------

    def _contract_targets(self, transactions: Sequence[TransactionRecord]) -> List[str]:
        seen: List[str] = []
        for t in transactions:
            addr = (t.to_address or "").strip().lower()
            if t.is_contract_interaction and addr and addr not in seen:
                seen.append(addr)
                if len(seen) >= self.max_contracts:
                    break
        return seen

    def check_contracts(
        self,
        transactions: Sequence[TransactionRecord],
        cancel: Optional[CancellationToken] = None,
    ) -> List[ScamIndicator]:
        out: List[ScamIndicator] = []

        for contract in self._contract_targets(transactions):
            check(cancel)
            try:
                slot = self.chain.get_storage_at(contract, settings.EIP1967_IMPLEMENTATION_SLOT, cancel)
                implementation = implementation_from_slot(slot)
                if implementation and has_code(self.chain.get_bytecode(implementation, cancel)):
                    out.append(ScamIndicator(
                        IndicatorKind.PROXY_UPGRADEABILITY_RISK,
                        f"Upgradeable proxy pattern detected at {contract}.",
                        Severity.WARNING,
                        Confidence.HIGH,
                        (contract, implementation),
                    ))

                bytecode = self.chain.get_bytecode(contract, cancel)
                if has_code(bytecode):
                    hex_len = len(_strip_0x(bytecode.strip()))
                    if hex_len < settings.SHORT_BYTECODE_HEX_CHARS:
                        out.append(ScamIndicator(
                            IndicatorKind.MALICIOUS_BYTECODE_SIMILARITY,
                            f"Contract {contract} has unusually short bytecode, common in drainer templates.",
                            Severity.WARNING,
                            Confidence.HIGH,
                            (contract, f"bytecodeLength={hex_len}"),
                        ))
            except Exception as exc:
                logger.warning("Contract lookup failed for %s, skipping: %s", contract, exc)

        return out

    # -------------------------
    # Receipts / event logs
    # -------------------------

    @staticmethod
    def _has_outflow_after(
        tx: TransactionRecord,
        transactions: Sequence[TransactionRecord],
        wallet: str,
    ) -> bool:
        for other in transactions:
            delta = other.timestamp - tx.timestamp
            if (
                0 < delta <= settings.APPROVAL_DRAIN_WINDOW_SEC
                and other.from_address.lower() == wallet
                and other.value_eth >= settings.APPROVAL_DRAIN_MIN_ETH
            ):
                return True
        return False

    def check_receipts(
        self,
        transactions: Sequence[TransactionRecord],
        wallet: Optional[str] = None,
        cancel: Optional[CancellationToken] = None,
    ) -> List[ScamIndicator]:
        out: List[ScamIndicator] = []
        subject = wallet.lower() if wallet else None

        for tx in list(transactions)[: self.max_receipts]:
            check(cancel)
            try:
                receipt = self.chain.get_receipt(tx.tx_hash, cancel)
                if receipt is None:
                    continue

                topics = {log.topic0 for log in receipt.logs}
                has_approval = settings.APPROVAL_TOPIC in topics
                has_transfer = settings.TRANSFER_TOPIC in topics

                if has_approval and subject and self._has_outflow_after(tx, transactions, subject):
                    out.append(ScamIndicator(
                        IndicatorKind.APPROVAL_DRAIN_PATTERN,
                        "Approval event followed by rapid outflow, possible drainer pattern.",
                        Severity.CRITICAL,
                        Confidence.VERIFIED,
                        (tx.tx_hash,),
                    ))

                if (
                    tx.is_contract_interaction
                    and tx.status == TxStatus.SUCCESS
                    and tx.value_eth == 0
                    and not has_approval
                    and not has_transfer
                ):
                    out.append(ScamIndicator(
                        IndicatorKind.EVENT_LOG_ANOMALY,
                        f"Successful contract call with no common transfer/approval events ({tx.tx_hash[:10]}...).",
                        Severity.WARNING,
                        Confidence.HIGH,
                        (tx.tx_hash,),
                    ))

                selector = (tx.input_data or "")[:10].lower()
                if selector in settings.HIGH_RISK_SELECTORS:
                    out.append(ScamIndicator(
                        IndicatorKind.SUSPICIOUS_SELECTOR,
                        "Call uses unknown high-risk selector pattern.",
                        Severity.WARNING,
                        Confidence.MEDIUM,
                        (tx.tx_hash, selector),
                    ))
            except Exception as exc:
                logger.warning("Receipt analysis failed for tx %s, skipping: %s", tx.tx_hash, exc)

        return out
