"""JSON-RPC node adapter used by the deposit flow."""

from __future__ import annotations

import logging
from typing import Any

import requests
from hexbytes import HexBytes
from web3 import HTTPProvider, Web3
from web3.exceptions import TransactionNotFound
from web3.types import ChecksumAddress, RPCEndpoint, TxReceipt

from .constants import DEFAULT_BALANCE_METHOD, DEFAULT_REQUEST_TIMEOUT
from .exceptions import NetworkError
from .utils import to_uint64

logger = logging.getLogger(__name__)


class NodeClient:
    """Thin wrapper around a Web3 HTTP connection to one node.

    Every failure is raised to the caller as-is; retrying is left to the
    pollers built on top of this class.
    """

    def __init__(
        self,
        rpc_url: str,
        *,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
        balance_method: str = DEFAULT_BALANCE_METHOD,
        session: requests.Session | None = None,
        web3: Web3 | None = None,
    ) -> None:
        self.rpc_url = rpc_url
        self._balance_method = balance_method
        self._session: requests.Session | None = None

        if web3 is None:
            self._session = session or requests.Session()
            provider = HTTPProvider(
                rpc_url,
                request_kwargs={"timeout": request_timeout},
                session=self._session,
                exception_retry_configuration=None,
            )
            web3 = Web3(provider)

        self._web3 = web3

    @property
    def web3(self) -> Web3:
        return self._web3

    def close(self) -> None:
        if self._session is not None:
            self._session.close()
            self._session = None

    # ------------------------------------------------------------------
    # Raw RPC
    # ------------------------------------------------------------------
    def call(self, method: str, *params: Any) -> Any:
        """Issue an arbitrary JSON-RPC request and return its result."""

        logger.debug("RPC %s %s", method, params)
        return self._web3.manager.request_blocking(RPCEndpoint(method), list(params))

    def set_balance(self, address: str, balance: int) -> None:
        """Overwrite an account balance through the node's admin method."""

        amount = to_uint64(balance, field="balance")
        account = Web3.to_checksum_address(address)
        try:
            self.call(self._balance_method, account, hex(amount))
        except Exception as exc:
            raise NetworkError(
                f"{account}, {amount}: {exc}",
                endpoint=self.rpc_url,
                details={"method": self._balance_method, "error": str(exc)},
            ) from exc

        logger.debug("Balance of %s set to %s", account, amount)

    # ------------------------------------------------------------------
    # Chain queries
    # ------------------------------------------------------------------
    def gas_price(self) -> int:
        return int(self._web3.eth.gas_price)

    def chain_id(self) -> int:
        return int(self._web3.eth.chain_id)

    def get_nonce(self, address: ChecksumAddress) -> int:
        return int(self._web3.eth.get_transaction_count(address))

    def get_code(self, address: ChecksumAddress) -> HexBytes:
        return HexBytes(self._web3.eth.get_code(address))

    def get_receipt(self, tx_hash: HexBytes | str) -> TxReceipt | None:
        """Return the receipt for ``tx_hash`` or None while it is unmined."""

        try:
            return self._web3.eth.get_transaction_receipt(tx_hash)  # type: ignore[arg-type]
        except TransactionNotFound:
            return None

    def send_raw_transaction(self, raw_transaction: bytes) -> HexBytes:
        return HexBytes(self._web3.eth.send_raw_transaction(raw_transaction))
