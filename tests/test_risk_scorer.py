import unittest

from scamcheck.core.enums import Confidence, IndicatorKind, Severity, Verdict
from scamcheck.core.models import ScamIndicator
from scamcheck.services.risk_scorer import (
    NO_TRANSACTIONS_SUMMARY,
    combined_score,
    compute_verdict,
    score_indicators,
    verdict_for,
)


def _ind(severity: Severity, confidence: Confidence = Confidence.MEDIUM) -> ScamIndicator:
    return ScamIndicator(IndicatorKind.UNVERIFIED_CONTRACT, "x", severity, confidence)


class RiskScorerTests(unittest.TestCase):
    def test_base_weights_at_medium_confidence(self) -> None:
        self.assertEqual(score_indicators([_ind(Severity.CRITICAL)]), 40)
        self.assertEqual(score_indicators([_ind(Severity.HIGH)]), 20)
        self.assertEqual(score_indicators([_ind(Severity.WARNING)]), 10)
        self.assertEqual(score_indicators([_ind(Severity.INFO)]), 2)

    def test_confidence_multipliers(self) -> None:
        self.assertEqual(score_indicators([_ind(Severity.CRITICAL, Confidence.VERIFIED)]), 60)
        self.assertEqual(score_indicators([_ind(Severity.WARNING, Confidence.HIGH)]), 13)  # 12.5 rounds up
        self.assertEqual(score_indicators([_ind(Severity.WARNING, Confidence.LOW)]), 6)

    def test_default_confidence_is_medium(self) -> None:
        ind = ScamIndicator(IndicatorKind.HONEYPOT_TOKEN, "x", Severity.WARNING)
        self.assertEqual(ind.confidence, Confidence.MEDIUM)
        self.assertEqual(score_indicators([ind]), 10)

    def test_each_indicator_is_rounded_before_summing(self) -> None:
        # INFO / LOW is 1.2 and rounds to 1 on its own
        self.assertEqual(score_indicators([_ind(Severity.INFO, Confidence.LOW)] * 5), 5)
        verdict, score, _ = compute_verdict([_ind(Severity.INFO, Confidence.LOW)] * 13, tx_count=13)
        self.assertEqual(score, 13)
        self.assertEqual(verdict, Verdict.CLEAN)

    def test_score_is_clamped_to_100(self) -> None:
        many = [_ind(Severity.CRITICAL, Confidence.VERIFIED)] * 10
        self.assertEqual(score_indicators(many), 100)
        self.assertEqual(score_indicators([]), 0)

    def test_verdict_thresholds(self) -> None:
        self.assertEqual(verdict_for(0), Verdict.CLEAN)
        self.assertEqual(verdict_for(14), Verdict.CLEAN)
        self.assertEqual(verdict_for(15), Verdict.SUSPICIOUS)
        self.assertEqual(verdict_for(39), Verdict.SUSPICIOUS)
        self.assertEqual(verdict_for(40), Verdict.LIKELY_SCAM)
        self.assertEqual(verdict_for(69), Verdict.LIKELY_SCAM)
        self.assertEqual(verdict_for(70), Verdict.CONFIRMED_SCAM)
        self.assertEqual(verdict_for(100), Verdict.CONFIRMED_SCAM)

    def test_score_bounds_and_verdict_consistency(self) -> None:
        severities = list(Severity)
        confidences = list(Confidence)
        for n in range(0, 12):
            inds = [
                _ind(severities[i % len(severities)], confidences[(i * 3) % len(confidences)])
                for i in range(n)
            ]
            verdict, score, _ = compute_verdict(inds, tx_count=3)
            with self.subTest(n=n):
                self.assertGreaterEqual(score, 0)
                self.assertLessEqual(score, 100)
                self.assertEqual(verdict, verdict_for(score))

    def test_no_transactions_is_always_clean(self) -> None:
        inds = [_ind(Severity.CRITICAL, Confidence.VERIFIED)] * 3
        verdict, score, summary = compute_verdict(inds, tx_count=0)
        self.assertEqual(verdict, Verdict.CLEAN)
        self.assertEqual(score, 0)
        self.assertEqual(summary, NO_TRANSACTIONS_SUMMARY)

    def test_summary_mentions_transaction_count(self) -> None:
        _, _, summary = compute_verdict([_ind(Severity.CRITICAL)], tx_count=7)
        self.assertIn("7 transaction(s)", summary)

    def test_combined_score(self) -> None:
        self.assertEqual(combined_score(50, {}), 50)
        # mean 60; 10 * 0.4 + 60 * 0.6 = 40
        self.assertEqual(combined_score(10, {"a": 100, "b": 20}), 40)
        # mean truncates to 23; 2 * 0.4 + 23 * 0.6 = 14.6 truncates to 14
        self.assertEqual(combined_score(2, {"a": 70, "b": 0, "c": 0}), 14)
        self.assertEqual(combined_score(0, {"a": 1}), 0)
        self.assertEqual(combined_score(100, {"a": 100}), 100)


if __name__ == "__main__":
    unittest.main()
