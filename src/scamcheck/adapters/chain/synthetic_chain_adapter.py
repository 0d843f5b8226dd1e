from __future__ import annotations

import hashlib
import random
import time
from decimal import Decimal
from typing import Dict, List, Optional

from scamcheck.core.cancellation import CancellationToken, check
from scamcheck.core.dto import ContractInfo, ReceiptLog, TransactionReceipt, TransactionRecord
from scamcheck.core.enums import TxStatus
from scamcheck.config.settings import APPROVAL_TOPIC, TRANSFER_TOPIC
from scamcheck.ports.chain_data_port import ChainDataPort


KNOWN_CONTRACTS = [
    "Uniswap V3 Router",
    "OpenSea: Seaport 1.5",
    "USDC Token",
    "USDT Token",
    "Wrapped Ether",
]

# None = unverified
SUSPICIOUS_NAMES = [None, None, None, "DrainerBot_v2", "FlashLoan_Exploit"]

TOKEN_SYMBOLS = ["USDC", "USDT", "WETH", "DAI", "SHIB", "PEPE", "SCAMTOKEN", "FAKEUSDC"]


def _seeded(seed_text: str) -> random.Random:
    digest = hashlib.sha256(seed_text.lower().encode("utf-8")).digest()
    return random.Random(int.from_bytes(digest[:8], "big"))


def _derive_address(seed: str, index: int) -> str:
    return "0x" + hashlib.sha256(f"{seed}:{index}".encode("utf-8")).hexdigest()[:40]


def _derive_hash(seed: str) -> str:
    return "0x" + hashlib.sha256(seed.encode("utf-8")).hexdigest()


def _random_hex(rng: random.Random, n_bytes: int) -> str:
    return "0x" + bytes(rng.getrandbits(8) for _ in range(n_bytes)).hex()


class SyntheticChainAdapter(ChainDataPort):
    """
    Deterministic fabricated chain data for demos and offline runs.

    Every wallet gets a stable neighbourhood of peers, so graph traversals
    and deep analysis find the same counterparties again on later calls.
    """

    def __init__(self, now_ts: Optional[int] = None) -> None:
        self._now = now_ts if now_ts is not None else int(time.time())
        self._cache: Dict[str, List[TransactionRecord]] = {}

    def _neighbourhood(self, wallet: str) -> List[TransactionRecord]:
        if wallet in self._cache:
            return self._cache[wallet]

        rng = _seeded(wallet)
        total = rng.randint(200, 799)
        peers = [_derive_address(wallet, i + 1) for i in range(rng.randint(15, 39))]

        txs: List[TransactionRecord] = []
        for i in range(total):
            peer = rng.choice(peers)
            outgoing = rng.random() < 0.5
            age_sec = rng.randint(1, 364) * 86400 + rng.randint(0, 1439) * 60
            is_contract = rng.randrange(4) == 0
            has_token = rng.randrange(3) != 0
            direction = "out" if outgoing else "in"

            to_address = wallet
            if outgoing:
                to_address = _derive_address(peer, 97 + i) if is_contract else peer

            txs.append(TransactionRecord(
                tx_hash=_derive_hash(f"{wallet}:{peer}:{direction}:{i}"),
                from_address=wallet if outgoing else peer,
                to_address=to_address,
                value_eth=Decimal(str(round(rng.random() * 5.0, 6))),
                timestamp=self._now - age_sec,
                token_symbol=rng.choice(TOKEN_SYMBOLS) if has_token else None,
                token_amount=Decimal(str(round(rng.random() * 50000, 2))) if has_token else Decimal("0"),
                is_contract_interaction=is_contract,
                contract_name=rng.choice(SUSPICIOUS_NAMES) if is_contract else None,
                status=TxStatus.FAILED if rng.randrange(15) == 0 else TxStatus.SUCCESS,
            ))

        txs.sort(key=lambda t: t.timestamp, reverse=True)
        self._cache[wallet] = txs
        return txs

    # ---------- port methods ----------

    def stream_transactions(self, address: str, cancel: Optional[CancellationToken] = None):
        for tx in self._neighbourhood(address.strip().lower()):
            check(cancel)
            yield tx

    def get_transaction(self, tx_hash: str, cancel: Optional[CancellationToken] = None) -> Optional[TransactionRecord]:
        check(cancel)
        rng = _seeded(tx_hash)
        is_contract = rng.randrange(2) == 0
        has_token = rng.randrange(2) == 0
        return TransactionRecord(
            tx_hash=tx_hash.lower(),
            from_address=_random_hex(rng, 20),
            to_address=_random_hex(rng, 20),
            value_eth=Decimal("0") if rng.randrange(2) == 0 else Decimal(str(round(rng.random() * 2.5, 6))),
            timestamp=self._now - rng.randint(1, 71) * 3600,
            token_symbol=rng.choice(TOKEN_SYMBOLS) if has_token else None,
            token_amount=Decimal(str(round(rng.random() * 10000, 2))) if has_token else Decimal("0"),
            is_contract_interaction=is_contract,
            contract_name=rng.choice(SUSPICIOUS_NAMES) if is_contract else None,
            status=TxStatus.FAILED if rng.randrange(10) == 0 else TxStatus.SUCCESS,
            input_data=_random_hex(rng, 36) if is_contract else None,
        )

    def get_receipt(self, tx_hash: str, cancel: Optional[CancellationToken] = None) -> Optional[TransactionReceipt]:
        check(cancel)
        rng = _seeded("receipt:" + tx_hash)
        logs = []
        roll = rng.randrange(6)
        if roll == 0:
            logs.append(ReceiptLog(address=_random_hex(rng, 20), topics=(APPROVAL_TOPIC,), data="0x"))
        elif roll < 4:
            logs.append(ReceiptLog(
                address=_random_hex(rng, 20),
                topics=(TRANSFER_TOPIC, "0x" + "0" * 64, "0x" + "0" * 64),
                data=hex(rng.getrandbits(64)),
            ))
        return TransactionReceipt(tx_hash=tx_hash.lower(), status="0x1", logs=tuple(logs))

    def get_contract_info(self, address: str, cancel: Optional[CancellationToken] = None) -> Optional[ContractInfo]:
        check(cancel)
        rng = _seeded(address)
        if rng.randrange(3) == 0:
            return None
        verified = rng.randrange(2) == 0
        return ContractInfo(
            address=address.lower(),
            name=rng.choice(KNOWN_CONTRACTS) if verified else None,
            is_verified=verified,
            is_proxy=rng.randrange(4) == 0,
            abi_fragment="transfer(address,uint256)" if verified else None,
        )

    def get_bytecode(self, address: str, cancel: Optional[CancellationToken] = None) -> Optional[str]:
        check(cancel)
        rng = _seeded("code:" + address)
        if rng.randrange(3) == 0:
            return "0x"
        # mostly full-size contracts, occasionally a tiny template
        size = rng.choice([24, 48, 512, 1024, 2048])
        return _random_hex(rng, size)

    def get_storage_at(self, address: str, slot: str, cancel: Optional[CancellationToken] = None) -> Optional[str]:
        check(cancel)
        rng = _seeded(f"slot:{address}:{slot}")
        if rng.randrange(4) != 0:
            return "0x" + "0" * 64
        return "0x" + "0" * 24 + _derive_address(address, 1967)[2:]
