import unittest

from scamcheck.adapters.chain.synthetic_chain_adapter import SyntheticChainAdapter
from scamcheck.core.enums import AnalysisStage
from scamcheck.core.models import AnalysisRequest
from scamcheck.services.onchain_detectors import implementation_from_slot
from scamcheck.services.scam_analyzer import ScamAnalyzer


NOW = 1_700_000_000
WALLET = "0x742d35cc6634c0532925a3b844bc454e4438f44e"


class SyntheticChainAdapterTests(unittest.TestCase):
    def test_same_wallet_same_history(self) -> None:
        a = list(SyntheticChainAdapter(now_ts=NOW).stream_transactions(WALLET))
        b = list(SyntheticChainAdapter(now_ts=NOW).stream_transactions(WALLET.upper().replace("0X", "0x")))
        self.assertEqual(a, b)

    def test_history_shape(self) -> None:
        txs = list(SyntheticChainAdapter(now_ts=NOW).stream_transactions(WALLET))

        self.assertGreaterEqual(len(txs), 200)
        self.assertLess(len(txs), 800)
        self.assertTrue(all(WALLET in (t.from_address, t.to_address) for t in txs))
        self.assertTrue(all(t.timestamp < NOW for t in txs))
        stamps = [t.timestamp for t in txs]
        self.assertEqual(stamps, sorted(stamps, reverse=True))

    def test_counterparties_are_stable_peers(self) -> None:
        chain = SyntheticChainAdapter(now_ts=NOW)
        peers = {t.from_address for t in chain.stream_transactions(WALLET) if t.to_address == WALLET}
        self.assertLessEqual(len(peers), 39)

    def test_lookups_are_deterministic(self) -> None:
        chain = SyntheticChainAdapter(now_ts=NOW)
        tx_hash = "0x" + "ab" * 32
        self.assertEqual(chain.get_transaction(tx_hash), chain.get_transaction(tx_hash))
        self.assertEqual(chain.get_receipt(tx_hash), chain.get_receipt(tx_hash))
        self.assertEqual(chain.get_bytecode(WALLET), chain.get_bytecode(WALLET))

        slot = chain.get_storage_at(WALLET, "0x0")
        self.assertEqual(len(slot), 66)
        decoded = implementation_from_slot(slot)
        self.assertTrue(decoded is None or len(decoded) == 42)

    def test_analysis_runs_end_to_end(self) -> None:
        analyzer = ScamAnalyzer(SyntheticChainAdapter(now_ts=NOW), deep_analysis=False, clock=lambda: NOW)
        events = list(analyzer.analyze(AnalysisRequest(WALLET)))

        self.assertEqual(events[-1].stage, AnalysisStage.COMPLETED)
        result = events[-1].result
        self.assertGreaterEqual(result.risk_score, 0)
        self.assertLessEqual(result.risk_score, 100)
        self.assertGreaterEqual(len(result.transactions), 200)


if __name__ == "__main__":
    unittest.main()
