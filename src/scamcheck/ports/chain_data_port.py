from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterator, Optional

from scamcheck.core.cancellation import CancellationToken
from scamcheck.core.dto import ContractInfo, TransactionReceipt, TransactionRecord


class ChainDataPort(ABC):
    """
    Abstract Class for fetching chain facts needed by the analyzer and graph builder.

    Transient I/O failures surface as DataSourceError; the caller decides
    whether to skip the item or abort.
    """

    # --- Wallet history ---

    @abstractmethod
    def stream_transactions(
        self,
        address: str,
        cancel: Optional[CancellationToken] = None,
    ) -> Iterator[TransactionRecord]:
        raise NotImplementedError

    # --- Single lookups ---

    @abstractmethod
    def get_transaction(
        self,
        tx_hash: str,
        cancel: Optional[CancellationToken] = None,
    ) -> Optional[TransactionRecord]:
        raise NotImplementedError

    @abstractmethod
    def get_receipt(
        self,
        tx_hash: str,
        cancel: Optional[CancellationToken] = None,
    ) -> Optional[TransactionReceipt]:
        raise NotImplementedError

    # --- Contract state ---

    @abstractmethod
    def get_contract_info(
        self,
        address: str,
        cancel: Optional[CancellationToken] = None,
    ) -> Optional[ContractInfo]:
        raise NotImplementedError

    @abstractmethod
    def get_bytecode(
        self,
        address: str,
        cancel: Optional[CancellationToken] = None,
    ) -> Optional[str]:
        raise NotImplementedError

    @abstractmethod
    def get_storage_at(
        self,
        address: str,
        slot: str,
        cancel: Optional[CancellationToken] = None,
    ) -> Optional[str]:
        raise NotImplementedError
