from scamcheck.core.cancellation import check
from scamcheck.core.dto import ContractInfo, TransactionReceipt, TransactionRecord
from scamcheck.core.errors import DataSourceError
from scamcheck.ports.chain_data_port import ChainDataPort
from typing import Dict, Iterable, List, Optional, Tuple

class StaticChainAdapter(ChainDataPort):
    def __init__(self,
                 transactions: Optional[List[TransactionRecord]] = None,
                 receipts: Optional[Dict[str, TransactionReceipt]] = None,
                 bytecode: Optional[Dict[str, str]] = None,
                 storage: Optional[Dict[Tuple[str, str], str]] = None,
                 contracts: Optional[Dict[str, ContractInfo]] = None,
                 failing: Optional[Iterable[str]] = None,
                 ):
        self._txs = transactions or []
        self._receipts = {k.lower(): v for k, v in (receipts or {}).items()}
        self._code = {k.lower(): v for k, v in (bytecode or {}).items()}
        self._storage = {(a.lower(), s.lower()): v for (a, s), v in (storage or {}).items()}
        self._contracts = {k.lower(): v for k, v in (contracts or {}).items()}
        # keys (addresses or hashes) whose lookups raise DataSourceError
        self._failing = {k.lower() for k in (failing or [])}
        self.calls: List[Tuple[str, str]] = []

    def _touch(self, method, key):
        self.calls.append((method, key.lower()))
        if key.lower() in self._failing:
            raise DataSourceError(f"static lookup failed for {key}")

    def stream_transactions(self, address, cancel = None):
        self._touch("stream_transactions", address)
        ad = address.lower()
        items = [
            t for t in self._txs
            if t.from_address.lower() == ad or t.to_address.lower() == ad
        ]
        items.sort(key=lambda x: x.timestamp, reverse=True)
        for t in items:
            check(cancel)
            yield t

    def get_transaction(self, tx_hash, cancel = None):
        check(cancel)
        self._touch("get_transaction", tx_hash)
        h = tx_hash.lower()
        for t in self._txs:
            if t.tx_hash.lower() == h:
                return t
        return None

    def get_receipt(self, tx_hash, cancel = None):
        check(cancel)
        self._touch("get_receipt", tx_hash)
        return self._receipts.get(tx_hash.lower())

    def get_contract_info(self, address, cancel = None):
        check(cancel)
        self._touch("get_contract_info", address)
        return self._contracts.get(address.lower())

    def get_bytecode(self, address, cancel = None):
        check(cancel)
        self._touch("get_bytecode", address)
        return self._code.get(address.lower())

    def get_storage_at(self, address, slot, cancel = None):
        check(cancel)
        self._touch("get_storage_at", address)
        return self._storage.get((address.lower(), slot.lower()))
