import unittest
from decimal import Decimal

from scamcheck.core.enums import GraphDirection, InputType
from scamcheck.core.models import (
    AnalysisRequest,
    WalletGraphQuery,
    is_transaction_hash,
    is_wallet_address,
)


WALLET = "0x742d35cc6634c0532925a3b844bc454e4438f44e"
TX_HASH = "0x" + "ab" * 32


class ValidationTests(unittest.TestCase):
    def test_wallet_address_predicate(self) -> None:
        cases = {
            WALLET: True,
            WALLET.upper().replace("0X", "0x"): True,
            "0x123": False,
            "742d35cc6634c0532925a3b844bc454e4438f44e42": False,
            "0x" + "g" * 40: False,
            "": False,
            None: False,
        }
        for value, expected in cases.items():
            with self.subTest(value=value):
                self.assertEqual(is_wallet_address(value), expected)

    def test_transaction_hash_predicate(self) -> None:
        self.assertTrue(is_transaction_hash(TX_HASH))
        self.assertFalse(is_transaction_hash(WALLET))
        self.assertFalse(is_transaction_hash("0x" + "z" * 64))
        self.assertFalse(is_transaction_hash(None))


class AnalysisRequestTests(unittest.TestCase):
    def test_detects_wallet_address(self) -> None:
        self.assertEqual(AnalysisRequest(WALLET).input_type, InputType.WALLET_ADDRESS)

    def test_detects_transaction_hash(self) -> None:
        self.assertEqual(AnalysisRequest(TX_HASH).input_type, InputType.TRANSACTION_HASH)

    def test_detects_unknown(self) -> None:
        self.assertEqual(AnalysisRequest("not-a-valid-address").input_type, InputType.UNKNOWN)

    def test_input_is_trimmed(self) -> None:
        req = AnalysisRequest(f"  {WALLET}\n")
        self.assertEqual(req.input, WALLET)
        self.assertEqual(req.input_type, InputType.WALLET_ADDRESS)

    def test_request_is_immutable(self) -> None:
        req = AnalysisRequest(WALLET)
        with self.assertRaises(Exception):
            req.input = TX_HASH  # type: ignore[misc]


class WalletGraphQueryTests(unittest.TestCase):
    def test_bounded_clamps_low_values(self) -> None:
        q = WalletGraphQuery(root=WALLET.upper().replace("0X", "0x"), depth=0, max_nodes=1,
                             max_edges=2, lookback_days=0).bounded()
        self.assertEqual(q.root, WALLET)
        self.assertEqual(q.depth, 1)
        self.assertEqual(q.max_nodes, 10)
        self.assertEqual(q.max_edges, 10)
        self.assertEqual(q.lookback_days, 1)

    def test_bounded_clamps_high_values(self) -> None:
        q = WalletGraphQuery(root=WALLET, depth=50, max_nodes=10**6,
                             max_edges=10**6, lookback_days=10**5).bounded()
        self.assertEqual(q.depth, 10)
        self.assertEqual(q.max_nodes, 5000)
        self.assertEqual(q.max_edges, 10000)
        self.assertEqual(q.lookback_days, 3650)

    def test_window_start_uses_now_override(self) -> None:
        q = WalletGraphQuery(root=WALLET, lookback_days=2, now_ts=1_000_000)
        self.assertEqual(q.window_start(), 1_000_000 - 2 * 86400)

    def test_min_value_normalized_to_decimal(self) -> None:
        q = WalletGraphQuery(root=WALLET, min_value_eth=0.5).bounded()  # type: ignore[arg-type]
        self.assertEqual(q.min_value_eth, Decimal("0.5"))

    def test_direction_parse(self) -> None:
        self.assertEqual(GraphDirection.parse("Outgoing"), GraphDirection.OUTGOING)
        self.assertEqual(GraphDirection.parse("incoming"), GraphDirection.INCOMING)
        self.assertEqual(GraphDirection.parse("sideways"), GraphDirection.BOTH)
        self.assertEqual(GraphDirection.parse(None), GraphDirection.BOTH)


if __name__ == "__main__":
    unittest.main()
