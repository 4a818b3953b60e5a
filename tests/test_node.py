from __future__ import annotations

from types import SimpleNamespace
from typing import Any, cast

import pytest
from hexbytes import HexBytes
from web3 import Web3
from web3.exceptions import TransactionNotFound

from portal_deposit.exceptions import NetworkError, ValidationError
from portal_deposit.node import NodeClient

_ADDRESS = "0x90f8bf6a479f320ead074411a4b0e7944ea8c9c1"


class DummyManager:
    def __init__(self, error: Exception | None = None) -> None:
        self.calls: list[tuple[str, list[Any]]] = []
        self._error = error

    def request_blocking(self, method: str, params: list[Any]) -> Any:
        self.calls.append((method, params))
        if self._error is not None:
            raise self._error
        return True


class DummyEth:
    def __init__(self) -> None:
        self.gas_price = 1_000_000_007
        self.chain_id = 900
        self.receipts: dict[str, Any] = {}

    def get_transaction_count(self, address: str) -> int:
        return 3

    def get_code(self, address: str) -> bytes:
        return b"\x60\x80"

    def get_transaction_receipt(self, tx_hash: Any) -> Any:
        key = HexBytes(tx_hash).to_0x_hex()
        if key not in self.receipts:
            raise TransactionNotFound(f"Transaction with hash: {key} not found.")
        return self.receipts[key]

    def send_raw_transaction(self, raw: bytes) -> bytes:
        return Web3.keccak(raw)


def _client(manager: DummyManager | None = None) -> tuple[NodeClient, DummyManager, DummyEth]:
    manager = manager or DummyManager()
    eth = DummyEth()
    web3 = cast(Web3, SimpleNamespace(manager=manager, eth=eth))
    return NodeClient("http://node", web3=web3), manager, eth


def test_set_balance_sends_hex_quantity() -> None:
    client, manager, _ = _client()

    client.set_balance(_ADDRESS, 10 * 10**18)

    assert manager.calls == [
        ("anvil_setBalance", [Web3.to_checksum_address(_ADDRESS), "0x8ac7230489e80000"])
    ]


def test_set_balance_uses_configured_method() -> None:
    manager = DummyManager()
    web3 = cast(Web3, SimpleNamespace(manager=manager, eth=DummyEth()))
    client = NodeClient("http://node", balance_method="hardhat_setBalance", web3=web3)

    client.set_balance(_ADDRESS, 1)

    assert manager.calls[0][0] == "hardhat_setBalance"


def test_set_balance_failure_names_account() -> None:
    client, _, _ = _client(DummyManager(error=ConnectionError("connection refused")))

    with pytest.raises(NetworkError) as excinfo:
        client.set_balance(_ADDRESS, 5)

    err = excinfo.value
    assert Web3.to_checksum_address(_ADDRESS) in str(err)
    assert "connection refused" in str(err)
    assert err.endpoint == "http://node"
    assert isinstance(err.__cause__, ConnectionError)


def test_set_balance_rejects_values_outside_uint64() -> None:
    client, manager, _ = _client()

    with pytest.raises(ValidationError):
        client.set_balance(_ADDRESS, 2**64)

    assert manager.calls == []


def test_call_propagates_errors_unchanged() -> None:
    client, _, _ = _client(DummyManager(error=ConnectionError("down")))

    with pytest.raises(ConnectionError):
        client.call("eth_blockNumber")


def test_typed_queries() -> None:
    client, _, _ = _client()
    address = Web3.to_checksum_address(_ADDRESS)

    assert client.gas_price() == 1_000_000_007
    assert client.chain_id() == 900
    assert client.get_nonce(address) == 3
    assert client.get_code(address) == HexBytes("0x6080")
    assert client.send_raw_transaction(b"\x01") == Web3.keccak(b"\x01")


def test_missing_receipt_is_none() -> None:
    client, _, eth = _client()
    tx_hash = "0x" + "ab" * 32

    assert client.get_receipt(tx_hash) is None

    eth.receipts[tx_hash] = {"transactionHash": HexBytes(tx_hash), "status": 1}
    assert client.get_receipt(tx_hash) == {"transactionHash": HexBytes(tx_hash), "status": 1}


def test_http_client_is_lazy() -> None:
    client = NodeClient("http://localhost:8888", request_timeout=2.0)

    assert client.rpc_url == "http://localhost:8888"
    assert client.web3.provider.endpoint_uri == "http://localhost:8888"
    client.close()
    client.close()
