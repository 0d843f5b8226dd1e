from __future__ import annotations

import logging
import time
import uuid
from typing import Callable, Dict, Iterator, List, Optional

from scamcheck.core.cancellation import CancellationToken, check
from scamcheck.core.dto import TransactionRecord
from scamcheck.core.enums import AnalysisStage, InputType, Verdict
from scamcheck.core.models import (
    AnalysisRequest,
    AnalysisResult,
    CounterpartyRisk,
    ProgressEvent,
    ScamIndicator,
)
from scamcheck.ports.analysis_port import ScamAnalysisPort
from scamcheck.ports.chain_data_port import ChainDataPort
from scamcheck.services import detectors
from scamcheck.services.onchain_detectors import OnChainVerifier
from scamcheck.services.risk_scorer import combined_score, compute_verdict


logger = logging.getLogger(__name__)

INVALID_INPUT_MESSAGE = (
    "Invalid input: must be a valid Ethereum wallet address (0x...42 chars) "
    "or transaction hash (0x...66 chars)."
)


class ScamAnalyzer(ScamAnalysisPort):
    """
    Staged scam analysis for a wallet address or transaction hash.

    - Stream: a lazy generator of ProgressEvent, in stage order
    - Detectors: per-transaction + batch heuristics, then on-chain verification
    - Deep analysis: scores every direct counterparty of a wallet (cheap path only)

    Cancellation raises OperationCancelled out of the generator; it is never
    reported as a FAILED event.
    """

    def __init__(
        self,
        chain: ChainDataPort,
        deep_analysis: bool = True,
        clock: Optional[Callable[[], int]] = None,
        verifier: Optional[OnChainVerifier] = None,
    ) -> None:
        self.chain = chain
        self.deep_analysis = deep_analysis
        self._clock = clock or (lambda: int(time.time()))
        self.verifier = verifier or OnChainVerifier(chain)

    def analyze(
        self,
        request: AnalysisRequest,
        cancel: Optional[CancellationToken] = None,
    ) -> Iterator[ProgressEvent]:
        aid = uuid.uuid4().hex[:12]

        def event(stage: AnalysisStage, message: str, percent: int, **extra) -> ProgressEvent:
            logger.debug("[%s] %s (%d%%): %s", aid, stage.value, percent, message)
            return ProgressEvent(aid, stage, message, percent, **extra)

        yield event(AnalysisStage.STARTED, f"Starting analysis for {request.input}", 5)

        if request.input_type == InputType.UNKNOWN:
            yield event(AnalysisStage.FAILED, INVALID_INPUT_MESSAGE, 0)
            return

        yield event(AnalysisStage.FETCHING_TRANSACTIONS, "Fetching transactions from blockchain...", 15)

        try:
            transactions = self._fetch(request, cancel)
        except Exception as exc:
            logger.warning("[%s] fetch failed for %s: %s", aid, request.input, exc)
            yield event(AnalysisStage.FAILED, f"Failed to fetch transactions: {exc}", 0)
            return

        yield event(
            AnalysisStage.ANALYZING_CONTRACTS,
            f"Fetched {len(transactions)} transaction(s). Analyzing contracts...",
            40,
        )

        check(cancel)
        indicators: List[ScamIndicator] = detectors.transaction_indicators(transactions)

        yield event(AnalysisStage.DETECTING_PATTERNS, "Detecting scam patterns...", 65)

        wallet = request.input.lower() if request.input_type == InputType.WALLET_ADDRESS else None
        indicators.extend(detectors.detect_patterns(transactions))
        if wallet:
            indicators.extend(detectors.detect_wallet_heuristics(wallet, transactions, self._clock()))
        indicators.extend(self.verifier.verify(transactions, wallet, cancel))

        yield event(AnalysisStage.COMPUTING_SCORE, "Computing risk score...", 85)

        verdict, score, summary = compute_verdict(indicators, len(transactions))
        result = AnalysisResult(
            analysis_id=aid,
            input=request.input,
            input_type=request.input_type,
            verdict=verdict,
            risk_score=score,
            summary=summary,
            transactions=tuple(transactions),
            indicators=tuple(indicators),
            analyzed_at=self._clock(),
        )

        yield event(AnalysisStage.COMPLETED, "Analysis complete.", 100, result=result)

        if wallet and transactions and self.deep_analysis:
            yield from self._deep_analysis(aid, wallet, score, transactions, event, cancel)

    # -------------------------
    # Fetch
    # -------------------------

    def _fetch(self, request: AnalysisRequest, cancel: Optional[CancellationToken]) -> List[TransactionRecord]:
        if request.input_type == InputType.WALLET_ADDRESS:
            out: List[TransactionRecord] = []
            for tx in self.chain.stream_transactions(request.input, cancel):
                check(cancel)
                out.append(tx)
            return out

        tx = self.chain.get_transaction(request.input, cancel)
        return [tx] if tx is not None else []

    # -------------------------
    # Deep analysis
    # -------------------------

    @staticmethod
    def _counterparties(wallet: str, transactions: List[TransactionRecord]) -> List[str]:
        seen: Dict[str, None] = {}
        for tx in transactions:
            for addr in (tx.from_address, tx.to_address):
                a = (addr or "").strip().lower()
                if a and a != wallet:
                    seen.setdefault(a, None)
        return list(seen)

    def score_counterparty(self, address: str, cancel: Optional[CancellationToken] = None):
        txs: List[TransactionRecord] = []
        for tx in self.chain.stream_transactions(address, cancel):
            check(cancel)
            txs.append(tx)

        indicators = detectors.transaction_indicators(txs) + detectors.detect_patterns(txs)
        verdict, score, _ = compute_verdict(indicators, len(txs))
        return verdict, score, len(txs)

    def _deep_analysis(self, aid, wallet, own_score, transactions, event, cancel) -> Iterator[ProgressEvent]:
        counterparties = self._counterparties(wallet, transactions)
        if not counterparties:
            return

        total = len(counterparties)
        yield event(
            AnalysisStage.DEEP_ANALYSIS,
            f"Deep analysis: scanning {total} counterparty address(es)...",
            100,
        )

        scores: Dict[str, int] = {}
        for n, addr in enumerate(counterparties, start=1):
            check(cancel)
            try:
                cp_verdict, cp_score, cp_count = self.score_counterparty(addr, cancel)
                note = f"risk: {cp_score}"
            except Exception as exc:
                logger.warning("[%s] counterparty %s failed, scoring 0: %s", aid, addr, exc)
                cp_verdict, cp_score, cp_count = Verdict.CLEAN, 0, 0
                note = f"error: {exc}"

            scores[addr] = cp_score
            running = combined_score(own_score, scores)
            yield event(
                AnalysisStage.DEEP_ANALYSIS,
                f"Analyzed {n}/{total}: {addr[:8]}... ({note})",
                100,
                counterparty=CounterpartyRisk(aid, addr, cp_score, cp_verdict, cp_count, running),
            )

        final = combined_score(own_score, scores)
        yield event(
            AnalysisStage.DEEP_ANALYSIS_COMPLETE,
            f"Deep analysis complete. Combined risk score: {final}",
            100,
            combined_score=final,
        )
