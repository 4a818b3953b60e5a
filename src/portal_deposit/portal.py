"""OptimismPortal contract binding."""

from __future__ import annotations

import logging
from typing import Any

from hexbytes import HexBytes
from web3 import Web3
from web3.contract import Contract
from web3.types import ChecksumAddress

from .exceptions import SigningError, ValidationError
from .node import NodeClient
from .transactions import TransactionDispatcher
from .types import SignedTransaction, TransactionRequest, TransactOpts

logger = logging.getLogger(__name__)

OptimismPortal_abi: list[dict[str, Any]] = [
    {
        "type": "function",
        "name": "depositTransaction",
        "stateMutability": "payable",
        "inputs": [
            {"name": "_to", "type": "address"},
            {"name": "_value", "type": "uint256"},
            {"name": "_gasLimit", "type": "uint64"},
            {"name": "_isCreation", "type": "bool"},
            {"name": "_data", "type": "bytes"},
        ],
        "outputs": [],
    },
]


class OptimismPortal:
    """Typed handle for the portal's deposit entry point."""

    def __init__(self, address: str, node: NodeClient) -> None:
        try:
            self.address: ChecksumAddress = Web3.to_checksum_address(address)
        except (TypeError, ValueError) as exc:
            raise ValidationError(
                "Invalid portal address",
                field="address",
                value=address,
                details={"error": str(exc)},
            ) from exc

        self._contract: Contract = node.web3.eth.contract(
            address=self.address, abi=OptimismPortal_abi
        )
        self._dispatcher = TransactionDispatcher(node)

    def encode_deposit(
        self, to: str, value: int, gas_limit: int, is_creation: bool, data: bytes
    ) -> HexBytes:
        args = [Web3.to_checksum_address(to), value, gas_limit, is_creation, data]
        return HexBytes(self._contract.encode_abi("depositTransaction", args=args))

    def deposit_transaction(
        self,
        opts: TransactOpts,
        to: str,
        value: int,
        gas_limit: int,
        is_creation: bool,
        data: bytes = b"",
    ) -> SignedTransaction:
        """Sign and submit ``depositTransaction``; returns the sent transaction."""

        try:
            calldata = self.encode_deposit(to, value, gas_limit, is_creation, data)
        except Exception as exc:
            raise SigningError(
                f"Failed to encode depositTransaction: {exc}",
                details={"to": to, "value": value, "gas_limit": gas_limit, "error": str(exc)},
            ) from exc

        request = TransactionRequest(
            nonce=opts.nonce,
            to=self.address,
            value=opts.value,
            gas=opts.gas_limit,
            gas_price=opts.gas_price,
            data=bytes(calldata),
            sender=opts.sender,
        )

        logger.debug("depositTransaction calldata %s", calldata.to_0x_hex())
        signed = opts.signer(opts.sender, request)
        self._dispatcher.send(signed, action="deposit tx")
        return signed
