from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Mapping, Tuple

from scamcheck.config import settings
from scamcheck.core.enums import Confidence, Severity, Verdict
from scamcheck.core.models import ScamIndicator


BASE_WEIGHTS = {
    Severity.CRITICAL: Decimal("40"),
    Severity.HIGH: Decimal("20"),
    Severity.WARNING: Decimal("10"),
    Severity.INFO: Decimal("2"),
}

CONFIDENCE_MULTIPLIERS = {
    Confidence.LOW: Decimal("0.6"),
    Confidence.MEDIUM: Decimal("1.0"),
    Confidence.HIGH: Decimal("1.25"),
    Confidence.VERIFIED: Decimal("1.5"),
}

NO_TRANSACTIONS_SUMMARY = "No transactions found for this input."


def _round(x: Decimal) -> int:
    return int(x.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _clamp(score: int) -> int:
    return max(0, min(100, score))


def indicator_weight(indicator: ScamIndicator) -> Decimal:
    base = BASE_WEIGHTS.get(indicator.severity, Decimal("0"))
    mult = CONFIDENCE_MULTIPLIERS.get(indicator.confidence or Confidence.MEDIUM, Decimal("1.0"))
    return base * mult


def score_indicators(indicators: Iterable[ScamIndicator]) -> int:
    return _clamp(sum(_round(indicator_weight(i)) for i in indicators))


def verdict_for(score: int) -> Verdict:
    if score >= 70:
        return Verdict.CONFIRMED_SCAM
    if score >= 40:
        return Verdict.LIKELY_SCAM
    if score >= 15:
        return Verdict.SUSPICIOUS
    return Verdict.CLEAN


def summary_for(verdict: Verdict, tx_count: int) -> str:
    if verdict == Verdict.CONFIRMED_SCAM:
        return (
            f"HIGH RISK: Multiple scam patterns detected across {tx_count} transaction(s). "
            "Do not interact further."
        )
    if verdict == Verdict.LIKELY_SCAM:
        return (
            f"LIKELY SCAM: Suspicious activity detected in {tx_count} transaction(s). "
            "Proceed with extreme caution."
        )
    if verdict == Verdict.SUSPICIOUS:
        return (
            f"SUSPICIOUS: Some unusual patterns found in {tx_count} transaction(s). "
            "Verify before proceeding."
        )
    return f"LOOKS CLEAN: No significant scam patterns detected in {tx_count} transaction(s)."


def compute_verdict(indicators: Iterable[ScamIndicator], tx_count: int) -> Tuple[Verdict, int, str]:
    """
    Map an indicator set to (verdict, score, summary).

    An empty transaction set is always clean, whatever indicators were raised.
    """
    if tx_count <= 0:
        return Verdict.CLEAN, 0, NO_TRANSACTIONS_SUMMARY

    score = score_indicators(indicators)
    verdict = verdict_for(score)
    return verdict, score, summary_for(verdict, tx_count)


def combined_score(own_score: int, counterparty_scores: Mapping[str, int]) -> int:
    """
    Own score weighs 40%, the mean counterparty score 60%.

    A clean wallet trading mostly with scammers still ends up high.
    """
    if not counterparty_scores:
        return own_score
    # both the mean and the mix truncate toward zero
    avg = sum(counterparty_scores.values()) // len(counterparty_scores)
    mixed = Decimal(own_score) * settings.OWN_SCORE_WEIGHT + Decimal(avg) * settings.COUNTERPARTY_SCORE_WEIGHT
    return _clamp(int(mixed))
