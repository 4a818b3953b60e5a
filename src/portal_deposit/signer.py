"""Transaction building and EIP-155 signing."""

from __future__ import annotations

import logging
from typing import cast

from eth_account import Account
from eth_account.signers.local import LocalAccount
from hexbytes import HexBytes
from web3.types import ChecksumAddress

from .constants import TRANSFER_GAS
from .exceptions import SigningError
from .types import SignedTransaction, TransactionRequest

logger = logging.getLogger(__name__)


def generate_account() -> LocalAccount:
    """Create a throwaway keypair for a single run."""

    return cast(LocalAccount, Account.create())


def build_transfer(
    nonce: int,
    to: ChecksumAddress | None,
    value: int,
    gas_price: int,
    *,
    gas: int = TRANSFER_GAS,
    sender: ChecksumAddress | None = None,
) -> TransactionRequest:
    """Build a plain value transfer with no call data."""

    return TransactionRequest(
        nonce=nonce,
        to=to,
        value=value,
        gas=gas,
        gas_price=gas_price,
        sender=sender,
    )


def recover_sender(signed: SignedTransaction) -> ChecksumAddress:
    """Recover the signing address from a raw signed transaction."""

    return cast(ChecksumAddress, Account.recover_transaction(signed.raw_transaction))


class TransactionSigner:
    """Sign legacy transactions for one account on one chain."""

    def __init__(self, account: LocalAccount, chain_id: int) -> None:
        self._account = account
        self.chain_id = chain_id

    @property
    def address(self) -> ChecksumAddress:
        return self._account.address

    def sign(self, request: TransactionRequest) -> SignedTransaction:
        try:
            signed = self._account.sign_transaction(request.as_dict(self.chain_id))
        except Exception as exc:
            raise SigningError(
                f"Failed to sign transaction: {exc}",
                request=request,
                details={"chain_id": self.chain_id, "error": str(exc)},
            ) from exc

        result = SignedTransaction(
            request=request,
            chain_id=self.chain_id,
            raw_transaction=HexBytes(signed.raw_transaction),
            hash=HexBytes(signed.hash),
            sender=self.address,
        )
        logger.debug("Signed transaction %s (nonce=%s)", result.hash_hex, request.nonce)
        return result

    def sign_for(self, address: ChecksumAddress, request: TransactionRequest) -> SignedTransaction:
        """Signer callback for contract bindings; only signs for our own address."""

        if address != self.address:
            raise SigningError(
                f"Signer for {self.address} cannot sign for {address}",
                request=request,
                details={"address": address},
            )
        return self.sign(request)
