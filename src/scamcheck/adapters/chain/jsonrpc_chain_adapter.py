import logging
from decimal import Decimal
from typing import Any, Dict, Iterator, List, Optional

import requests

from scamcheck.config.settings import (
    RPC_URL,
    RPC_TIMEOUT_SEC,
    RPC_MAX_RETRIES,
    RPC_REQUESTS_PER_SEC,
    RPC_PAGE_SIZE,
    RPC_MAX_TRANSACTIONS,
    TRANSFER_TOPIC,
)

from scamcheck.adapters.chain.rate_limiter import SimpleRateLimiter, backoff_sleep
from scamcheck.core.cancellation import CancellationToken, check
from scamcheck.core.dto import ContractInfo, ReceiptLog, TransactionReceipt, TransactionRecord
from scamcheck.core.enums import TxStatus
from scamcheck.core.errors import DataSourceError, RateLimitError
from scamcheck.ports.chain_data_port import ChainDataPort


logger = logging.getLogger(__name__)

WEI_PER_ETH = Decimal("1000000000000000000")
_ETH_PLACES = Decimal("0.000001")
_TOKEN_PLACES = Decimal("0.0001")


def _hex_to_int(raw: Optional[str]) -> int:
    if not raw or raw in ("0x", "0x0"):
        return 0
    try:
        return int(raw, 16)
    except ValueError:
        return 0


class JsonRpcChainAdapter(ChainDataPort):
    """
    Chain data from an Erigon node with the Otterscan ``ots_`` namespace enabled.
    """

    def __init__(
        self,
        rpc_url: Optional[str] = None,
        session: Optional[requests.Session] = None,
        requests_per_sec: float = RPC_REQUESTS_PER_SEC,
        max_transactions: int = RPC_MAX_TRANSACTIONS,
    ) -> None:
        self._url = rpc_url or RPC_URL
        if not self._url:
            raise DataSourceError("No JSON-RPC url configured (SCAMCHECK_RPC_URL)")
        self._timeout = RPC_TIMEOUT_SEC
        self._max_retries = RPC_MAX_RETRIES
        self._page_size = RPC_PAGE_SIZE
        self._max_transactions = max_transactions

        self._rl = SimpleRateLimiter(requests_per_sec)
        self._session = session or requests.Session()
        self._request_id = 0

    # ---------- internal ----------

    def _call(self, method: str, params: List[Any], cancel: Optional[CancellationToken] = None) -> Any:
        self._request_id += 1
        payload = {
            "jsonrpc": "2.0",
            "id": self._request_id,
            "method": method,
            "params": params,
        }

        last_err: Optional[Exception] = None
        data: Optional[Dict[str, Any]] = None

        for attempt in range(self._max_retries):
            check(cancel)
            try:
                self._rl.wait(cancel)
                resp = self._session.post(self._url, json=payload, timeout=self._timeout)
                if resp.status_code == 429:
                    last_err = RateLimitError(f"{method}: HTTP 429")
                    logger.warning("RPC rate limited on %s (attempt %d)", method, attempt + 1)
                    backoff_sleep(attempt, cancel)
                    continue
                resp.raise_for_status()
                data = resp.json()
                break
            except (requests.RequestException, ValueError) as e:
                last_err = e
                logger.warning("RPC %s failed (attempt %d): %s", method, attempt + 1, e)
                backoff_sleep(attempt, cancel)

        if data is None:
            raise DataSourceError(f"RPC {method} failed after retries: {last_err}")

        if not isinstance(data, dict):
            raise DataSourceError(f"Invalid RPC response for {method}: {data!r}")

        err = data.get("error")
        if err:
            code = err.get("code") if isinstance(err, dict) else None
            message = err.get("message") if isinstance(err, dict) else err
            raise DataSourceError(f"RPC error {code} on {method}: {message}")

        return data.get("result")

    def _block_timestamp(self, block_number: str, cache: Dict[str, Optional[int]], cancel) -> Optional[int]:
        if block_number not in cache:
            block = self._call("eth_getBlockByNumber", [block_number, False], cancel) or {}
            cache[block_number] = _hex_to_int(block.get("timestamp")) or None
        return cache[block_number]

    @staticmethod
    def _to_receipt(tx_hash: str, raw: Dict[str, Any]) -> TransactionReceipt:
        logs = tuple(
            ReceiptLog(
                address=(l.get("address") or "").lower(),
                topics=tuple(t.lower() for t in (l.get("topics") or [])),
                data=l.get("data") or "0x",
            )
            for l in (raw.get("logs") or [])
            if isinstance(l, dict)
        )
        return TransactionReceipt(tx_hash=tx_hash, status=raw.get("status") or "0x0", logs=logs)

    @staticmethod
    def _to_record(tx: Dict[str, Any], receipt: Optional[TransactionReceipt], timestamp: int) -> TransactionRecord:
        value_eth = (Decimal(_hex_to_int(tx.get("value"))) / WEI_PER_ETH).quantize(_ETH_PLACES)
        input_data = tx.get("input") or None

        if receipt is None:
            status = TxStatus.PENDING
        elif receipt.status == "0x1":
            status = TxStatus.SUCCESS
        elif receipt.status == "0x0":
            status = TxStatus.FAILED
        else:
            status = TxStatus.PENDING

        # first ERC-20 Transfer log; decimals are not resolved here, 18 assumed
        token_symbol = None
        token_amount = Decimal("0")
        for log in (receipt.logs if receipt else ()):
            if len(log.topics) >= 3 and log.topic0 == TRANSFER_TOPIC:
                token_amount = (Decimal(_hex_to_int(log.data)) / WEI_PER_ETH).quantize(_TOKEN_PLACES)
                token_symbol = "ERC20"
                break

        return TransactionRecord(
            tx_hash=tx.get("hash") or "",
            from_address=(tx.get("from") or "").lower(),
            to_address=(tx.get("to") or "").lower(),
            value_eth=value_eth,
            timestamp=timestamp,
            token_symbol=token_symbol,
            token_amount=token_amount,
            is_contract_interaction=bool(input_data) and input_data != "0x",
            contract_name=None,
            status=status,
            input_data=input_data,
        )

    # ---------- port methods ----------

    def stream_transactions(self, address: str, cancel: Optional[CancellationToken] = None) -> Iterator[TransactionRecord]:
        logger.info("Fetching transactions for wallet %s", address)

        # block 0 = start from the chain head and walk backwards
        page_token = 0
        yielded = 0
        timestamps: Dict[str, Optional[int]] = {}

        while yielded < self._max_transactions:
            check(cancel)
            result = self._call(
                "ots_searchTransactionsBefore",
                [address, page_token, self._page_size],
                cancel,
            ) or {}

            txs = [t for t in (result.get("txs") or []) if isinstance(t, dict)]
            if not txs:
                break

            logger.debug("Page of %d txs for %s (lastPage=%s)", len(txs), address, result.get("lastPage"))

            page_receipts = {
                (r.get("transactionHash") or "").lower(): r
                for r in (result.get("receipts") or [])
                if isinstance(r, dict)
            }

            for tx in txs:
                if yielded >= self._max_transactions:
                    break
                check(cancel)
                tx_hash = tx.get("hash") or ""
                raw_receipt = page_receipts.get(tx_hash.lower())
                if raw_receipt is None:
                    raw_receipt = self._call("eth_getTransactionReceipt", [tx_hash], cancel)
                receipt = self._to_receipt(tx_hash, raw_receipt) if raw_receipt else None

                if raw_receipt and raw_receipt.get("timestamp") is not None:
                    raw_ts = raw_receipt["timestamp"]
                    ts = _hex_to_int(raw_ts) if isinstance(raw_ts, str) else int(raw_ts)
                elif tx.get("blockNumber"):
                    ts = self._block_timestamp(tx["blockNumber"], timestamps, cancel)
                else:
                    ts = None

                if ts is None:
                    logger.warning("No timestamp for tx %s, skipping", tx_hash)
                    continue
                yield self._to_record(tx, receipt, ts)
                yielded += 1

            if result.get("lastPage"):
                break

            # next cursor: block of the oldest tx in this page
            last_block = txs[-1].get("blockNumber")
            if not last_block:
                break
            page_token = _hex_to_int(last_block)

        logger.info("Finished fetching %d transactions for %s", yielded, address)

    def get_transaction(self, tx_hash: str, cancel: Optional[CancellationToken] = None) -> Optional[TransactionRecord]:
        logger.info("Fetching transaction %s", tx_hash)
        tx = self._call("eth_getTransactionByHash", [tx_hash], cancel)
        if not tx:
            return None

        if not tx.get("blockNumber"):
            logger.warning("Transaction %s is not mined yet, no timestamp", tx_hash)
            return None
        ts = self._block_timestamp(tx["blockNumber"], {}, cancel)
        if ts is None:
            logger.warning("No block timestamp for tx %s", tx_hash)
            return None
        receipt = self.get_receipt(tx_hash, cancel)
        return self._to_record(tx, receipt, ts)

    def get_receipt(self, tx_hash: str, cancel: Optional[CancellationToken] = None) -> Optional[TransactionReceipt]:
        raw = self._call("eth_getTransactionReceipt", [tx_hash], cancel)
        if not raw:
            return None
        return self._to_receipt(tx_hash, raw)

    def get_contract_info(self, address: str, cancel: Optional[CancellationToken] = None) -> Optional[ContractInfo]:
        code = self.get_bytecode(address, cancel)
        if code in (None, "0x", "0x0"):
            return None
        # the node has no verification metadata
        return ContractInfo(address=address.lower(), name=None, is_verified=False, is_proxy=False)

    def get_bytecode(self, address: str, cancel: Optional[CancellationToken] = None) -> Optional[str]:
        return self._call("eth_getCode", [address, "latest"], cancel)

    def get_storage_at(self, address: str, slot: str, cancel: Optional[CancellationToken] = None) -> Optional[str]:
        return self._call("eth_getStorageAt", [address, slot, "latest"], cancel)
