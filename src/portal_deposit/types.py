"""Type definitions and data models for the portal deposit flow."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from eth_account.signers.local import LocalAccount
from eth_typing import ChecksumAddress
from hexbytes import HexBytes

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from .signer import TransactionSigner


@dataclass(frozen=True)
class TransactionRequest:
    """Unsigned legacy transaction: value transfer or contract call."""

    nonce: int
    to: ChecksumAddress | None
    value: int
    gas: int
    gas_price: int
    data: bytes = b""
    sender: ChecksumAddress | None = None

    def as_dict(self, chain_id: int | None = None) -> dict[str, Any]:
        """Return the transaction dict consumed by eth-account."""

        tx: dict[str, Any] = {
            "nonce": self.nonce,
            "value": self.value,
            "gas": self.gas,
            "gasPrice": self.gas_price,
            "data": HexBytes(self.data),
        }
        # contract creation carries no recipient
        if self.to is not None:
            tx["to"] = self.to
        if chain_id is not None:
            tx["chainId"] = chain_id
        return tx


@dataclass(frozen=True)
class SignedTransaction:
    """A transaction request bound to a signature under one chain id."""

    request: TransactionRequest
    chain_id: int
    raw_transaction: HexBytes
    hash: HexBytes
    sender: ChecksumAddress

    @property
    def hash_hex(self) -> str:
        return self.hash.to_0x_hex()


SignerFn = Callable[[ChecksumAddress, TransactionRequest], SignedTransaction]


@dataclass(frozen=True)
class TransactOpts:
    """Options for a contract call: who signs, what it pays and with which nonce."""

    sender: ChecksumAddress
    signer: SignerFn
    gas_price: int
    gas_limit: int
    nonce: int
    value: int = 0


@dataclass(frozen=True)
class FlowContext:
    """Values fetched once and shared by every later step of the flow."""

    account: LocalAccount
    chain_id: int
    gas_price: int
    signer: "TransactionSigner"

    @property
    def address(self) -> ChecksumAddress:
        return self.account.address


@dataclass
class DepositResult:
    """Outcome of a completed deposit flow."""

    account: ChecksumAddress
    transfer_tx_hash: str
    deposit_tx_hash: str
    transfer_receipt: dict[str, Any] | None = None
    deposit_receipt: dict[str, Any] | None = None
    report: str = ""
