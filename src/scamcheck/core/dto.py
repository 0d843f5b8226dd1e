from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional, Tuple

from scamcheck.core.enums import TxStatus


@dataclass(frozen=True)
class TransactionRecord:
    tx_hash: str
    from_address: str
    to_address: str
    value_eth: Decimal
    timestamp: int                  # unix seconds
    token_symbol: Optional[str] = None
    token_amount: Decimal = Decimal("0")
    is_contract_interaction: bool = False
    contract_name: Optional[str] = None
    status: TxStatus = TxStatus.SUCCESS
    input_data: Optional[str] = None    # raw call data, 0x-prefixed

    @property
    def has_token(self) -> bool:
        return self.token_amount > 0


@dataclass(frozen=True)
class ContractInfo:
    address: str
    name: Optional[str]
    is_verified: bool
    is_proxy: bool
    abi_fragment: Optional[str] = None


@dataclass(frozen=True)
class ReceiptLog:
    address: str
    topics: Tuple[str, ...] = ()
    data: str = "0x"

    @property
    def topic0(self) -> Optional[str]:
        return self.topics[0].lower() if self.topics else None


@dataclass(frozen=True)
class TransactionReceipt:
    tx_hash: str
    status: str                     # raw hex status, "0x1" on success
    logs: Tuple[ReceiptLog, ...] = field(default_factory=tuple)
