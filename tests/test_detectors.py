import unittest
from decimal import Decimal

from scamcheck.core.dto import TransactionRecord
from scamcheck.core.enums import Confidence, IndicatorKind, Severity, TxStatus
from scamcheck.services.detectors import (
    detect_patterns,
    detect_wallet_heuristics,
    transaction_indicators,
)


NOW = 1_700_000_000
WALLET = "0x" + "a" * 40


def _peer(i: int) -> str:
    return "0x" + f"{i:040x}"


def _tx(i: int, **overrides) -> TransactionRecord:
    defaults = dict(
        tx_hash="0x" + f"{i:064x}",
        from_address=WALLET,
        to_address=_peer(i + 1),
        value_eth=Decimal("1"),
        timestamp=NOW - 30 * 86400 + i,
    )
    defaults.update(overrides)
    return TransactionRecord(**defaults)


def _kinds(indicators):
    return [i.kind for i in indicators]


class TransactionIndicatorTests(unittest.TestCase):
    def test_unverified_contract_flagged_per_transaction(self) -> None:
        txs = [_tx(i, is_contract_interaction=True) for i in range(3)]
        inds = transaction_indicators(txs)
        self.assertEqual(_kinds(inds), [IndicatorKind.UNVERIFIED_CONTRACT] * 3)
        self.assertTrue(all(i.severity == Severity.WARNING for i in inds))

    def test_named_contract_is_not_flagged(self) -> None:
        inds = transaction_indicators([_tx(1, is_contract_interaction=True, contract_name="Uniswap V3 Router")])
        self.assertEqual(inds, [])

    def test_zero_value_transfer_is_info(self) -> None:
        inds = transaction_indicators([_tx(1, value_eth=Decimal("0"))])
        self.assertEqual(_kinds(inds), [IndicatorKind.ZERO_VALUE_TRANSFER])
        self.assertEqual(inds[0].severity, Severity.INFO)


class PatternTests(unittest.TestCase):
    def test_empty_batch_has_no_patterns(self) -> None:
        self.assertEqual(detect_patterns([]), [])

    def test_rapid_token_dump(self) -> None:
        txs = [
            _tx(i, token_symbol="PEPE", token_amount=Decimal("1000"), timestamp=NOW - 60 * i)
            for i in range(6)
        ]
        inds = detect_patterns(txs)
        dumps = [i for i in inds if i.kind == IndicatorKind.RAPID_TOKEN_DUMP]
        self.assertEqual(len(dumps), 1)
        self.assertEqual(dumps[0].severity, Severity.HIGH)

    def test_five_token_transfers_are_not_a_dump(self) -> None:
        txs = [_tx(i, token_symbol="PEPE", token_amount=Decimal("1"), timestamp=NOW - i) for i in range(5)]
        self.assertNotIn(IndicatorKind.RAPID_TOKEN_DUMP, _kinds(detect_patterns(txs)))

    def test_slow_token_transfers_are_not_a_dump(self) -> None:
        txs = [_tx(i, token_symbol="PEPE", token_amount=Decimal("1"), timestamp=NOW - 300 * i) for i in range(6)]
        self.assertNotIn(IndicatorKind.RAPID_TOKEN_DUMP, _kinds(detect_patterns(txs)))

    def test_honeypot_token_seen_once(self) -> None:
        txs = [
            _tx(1, token_symbol="SCAMTOKEN", token_amount=Decimal("5")),
            _tx(2, token_symbol="USDC", token_amount=Decimal("5")),
            _tx(3, token_symbol="USDC", token_amount=Decimal("7")),
        ]
        honeypots = [i for i in detect_patterns(txs) if i.kind == IndicatorKind.HONEYPOT_TOKEN]
        self.assertEqual(len(honeypots), 1)
        self.assertIn("SCAMTOKEN", honeypots[0].description)
        self.assertEqual(honeypots[0].severity, Severity.WARNING)

    def test_fake_approval_needs_more_than_two_calls(self) -> None:
        two = [_tx(i, is_contract_interaction=True, value_eth=Decimal("0")) for i in range(2)]
        self.assertNotIn(IndicatorKind.FAKE_APPROVAL, _kinds(detect_patterns(two)))

        four = [_tx(i, is_contract_interaction=True, value_eth=Decimal("0")) for i in range(4)]
        fakes = [i for i in detect_patterns(four) if i.kind == IndicatorKind.FAKE_APPROVAL]
        self.assertEqual(len(fakes), 1)
        self.assertEqual(fakes[0].severity, Severity.CRITICAL)
        self.assertEqual(len(fakes[0].evidence), 3)


class WalletHeuristicTests(unittest.TestCase):
    def test_counterparty_concentration(self) -> None:
        # 3 peers carry 12 of 15 occurrences; 6 distinct peers overall
        txs = []
        n = 0
        for peer, count in ((1, 4), (2, 4), (3, 4), (4, 1), (5, 1), (6, 1)):
            for _ in range(count):
                txs.append(_tx(n, to_address=_peer(peer)))
                n += 1
        inds = detect_wallet_heuristics(WALLET, txs, NOW)
        conc = [i for i in inds if i.kind == IndicatorKind.COUNTERPARTY_CONCENTRATION]
        self.assertEqual(len(conc), 1)
        self.assertEqual(conc[0].confidence, Confidence.MEDIUM)

    def test_concentration_needs_six_distinct_counterparties(self) -> None:
        txs = [_tx(i, to_address=_peer(i % 5)) for i in range(20)]
        inds = detect_wallet_heuristics(WALLET, txs, NOW)
        self.assertNotIn(IndicatorKind.COUNTERPARTY_CONCENTRATION, _kinds(inds))

    def test_spread_counterparties_not_flagged(self) -> None:
        txs = [_tx(i, to_address=_peer(i)) for i in range(10)]
        self.assertNotIn(IndicatorKind.COUNTERPARTY_CONCENTRATION, _kinds(detect_wallet_heuristics(WALLET, txs, NOW)))

    def test_wallet_age_anomaly(self) -> None:
        txs = [
            _tx(1, timestamp=NOW - 2 * 86400, value_eth=Decimal("12")),
            _tx(2, timestamp=NOW - 86400),
        ]
        inds = detect_wallet_heuristics(WALLET, txs, NOW)
        age = [i for i in inds if i.kind == IndicatorKind.WALLET_AGE_ANOMALY]
        self.assertEqual(len(age), 1)
        self.assertEqual(age[0].severity, Severity.WARNING)

    def test_old_wallet_with_high_value_not_flagged(self) -> None:
        txs = [_tx(1, timestamp=NOW - 90 * 86400, value_eth=Decimal("50"))]
        self.assertNotIn(IndicatorKind.WALLET_AGE_ANOMALY, _kinds(detect_wallet_heuristics(WALLET, txs, NOW)))

    def test_failed_transaction_spike(self) -> None:
        txs = [_tx(i, status=TxStatus.FAILED if i < 3 else TxStatus.SUCCESS) for i in range(6)]
        inds = detect_wallet_heuristics(WALLET, txs, NOW)
        spikes = [i for i in inds if i.kind == IndicatorKind.FAILED_TX_SPIKE]
        self.assertEqual(len(spikes), 1)
        self.assertEqual(spikes[0].confidence, Confidence.LOW)
        self.assertEqual(spikes[0].severity, Severity.INFO)

    def test_failed_spike_needs_six_transactions(self) -> None:
        txs = [_tx(i, status=TxStatus.FAILED) for i in range(5)]
        self.assertNotIn(IndicatorKind.FAILED_TX_SPIKE, _kinds(detect_wallet_heuristics(WALLET, txs, NOW)))


if __name__ == "__main__":
    unittest.main()
