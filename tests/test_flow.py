from __future__ import annotations

import json
import logging
import threading
from typing import Any, cast

import pytest
import requests
from eth_abi import decode as abi_decode
from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import Web3

from portal_deposit.config import DepositFlowConfig
from portal_deposit.exceptions import (
    FlowCancelledError,
    NetworkError,
    SigningError,
    SubmissionError,
)
from portal_deposit.flow import DepositFlow
from portal_deposit.node import NodeClient
from portal_deposit.polling import Poller
from portal_deposit.signer import TransactionSigner, recover_sender

from fakes import FakeNode

_KEY = "0x" + "3c" * 32
_ZERO = "0x0000000000000000000000000000000000000000"
_DEPOSIT_TYPES = ["address", "uint256", "uint64", "bool", "bytes"]


def _account() -> LocalAccount:
    return cast(LocalAccount, Account.from_key(_KEY))


def _flow(node: FakeNode, account: LocalAccount | None = None) -> DepositFlow:
    poller = Poller(1.0, sleep=lambda _seconds: None)
    return DepositFlow(
        DepositFlowConfig(), cast(NodeClient, node), account=account or _account(), poller=poller
    )


def test_transfer_is_funded_signed_and_confirmed() -> None:
    node = FakeNode()
    account = _account()
    flow = _flow(node, account)

    flow.fund(account)
    ctx = flow.prepare(account)
    transfer = flow.send_transfer(ctx)
    receipt = flow.await_receipt(transfer, "transferTx")

    assert node.balances == [(account.address, 10 * 10**18)]
    assert ctx.chain_id == 901
    assert transfer.request.nonce == 0
    assert transfer.request.to == _ZERO
    assert transfer.request.value == 10**16
    assert transfer.request.gas == 21_000
    assert transfer.request.gas_price == 1_000_000_000
    assert transfer.request.data == b""
    assert recover_sender(transfer) == account.address
    assert receipt["transactionHash"] == transfer.hash


def test_full_run_deposits_through_portal(caplog: pytest.LogCaptureFixture) -> None:
    node = FakeNode(empty_code_polls=3, pending_receipt_polls=2)
    account = _account()

    with caplog.at_level(logging.INFO):
        result = _flow(node, account).run()

    assert result.account == account.address
    assert len(node.sent) == 2
    assert result.transfer_tx_hash == Web3.keccak(node.sent[0]).to_0x_hex()
    assert result.deposit_tx_hash == Web3.keccak(node.sent[1]).to_0x_hex()
    assert result.deposit_receipt is not None
    assert result.deposit_receipt["transactionHash"] == result.deposit_tx_hash

    # the deposit is only submitted once the portal has code
    last_code_query = max(i for i, event in enumerate(node.events) if event == "get_code")
    deposit_send = [i for i, event in enumerate(node.events) if event == "send_raw_transaction"][1]
    assert node.events.count("get_code") == 4
    assert last_code_query < deposit_send

    assert Account.recover_transaction(node.sent[1]) == account.address

    messages = [record.getMessage() for record in caplog.records]
    assert messages.count("waiting for contract [OptimismPortal] to be deployed") == 3
    dumped = json.loads(result.report)
    assert dumped["transactionHash"] == result.deposit_tx_hash
    assert result.report.startswith("{\n  ")
    assert dumped["logs"][0]["data"] == "0x01"


def test_deposit_uses_fresh_nonce_and_fixed_options() -> None:
    node = FakeNode()
    account = _account()
    flow = _flow(node, account)

    ctx = flow.prepare(account)
    flow.send_transfer(ctx)
    deposit = flow.send_deposit(ctx, flow.connect_portal())

    request = deposit.request
    assert request.nonce == 1
    assert request.to == DepositFlowConfig().portal_address
    assert request.value == 10**18
    assert request.gas == 1_000_000
    assert request.gas_price == ctx.gas_price

    selector = Web3.keccak(text="depositTransaction(address,uint256,uint64,bool,bytes)")[:4]
    assert request.data[:4] == bytes(selector)
    to, mint_value, l2_gas, is_creation, data = abi_decode(_DEPOSIT_TYPES, request.data[4:])
    assert to.lower() == account.address.lower()
    assert mint_value == 10**18 // 2
    assert l2_gas == 25_000_000 // 2
    assert is_creation is False
    assert data == b""


@pytest.mark.parametrize(
    "node_kwargs",
    [
        {"gas_price": requests.exceptions.ConnectionError("connection refused")},
        {"chain_id": ValueError("method not found")},
    ],
)
def test_price_or_chain_id_failure_aborts_before_signing(
    monkeypatch: pytest.MonkeyPatch, node_kwargs: dict[str, Any]
) -> None:
    def fail_sign(self: TransactionSigner, request: Any) -> Any:
        raise AssertionError("nothing should be signed")

    monkeypatch.setattr(TransactionSigner, "sign", fail_sign)
    node = FakeNode(**node_kwargs)

    with pytest.raises(NetworkError) as excinfo:
        _flow(node).run()

    assert excinfo.value.endpoint == "http://fake"
    assert node.sent == []
    assert "send_raw_transaction" not in node.events


def test_funding_failure_aborts_flow() -> None:
    node = FakeNode(balance_error=NetworkError("admin call rejected"))

    with pytest.raises(NetworkError):
        _flow(node).run()

    assert node.events == ["set_balance"]


def test_rejected_deposit_is_logged_and_raised(caplog: pytest.LogCaptureFixture) -> None:
    node = FakeNode(reject_sends_after=1)

    with caplog.at_level(logging.ERROR, logger="portal_deposit.flow"):
        with pytest.raises(SubmissionError) as excinfo:
            _flow(node).run()

    assert len(node.sent) == 1
    assert excinfo.value.request is not None
    assert any(record.getMessage().startswith("deposit tx: ") for record in caplog.records)


def test_signing_failure_is_distinct_from_submission(monkeypatch: pytest.MonkeyPatch) -> None:
    node = FakeNode()

    def broken_sign(self: TransactionSigner, request: Any) -> Any:
        raise SigningError("malformed transaction", request=request)

    monkeypatch.setattr(TransactionSigner, "sign", broken_sign)

    with pytest.raises(SigningError):
        _flow(node).run()

    assert node.sent == []


def test_programming_errors_are_not_reported_as_network_errors() -> None:
    node = FakeNode(gas_price=TypeError("unsupported operand"))

    with pytest.raises(TypeError):
        _flow(node).run()

    assert node.sent == []


def test_cancel_between_steps_stops_before_transfer() -> None:
    cancel = threading.Event()
    node = FakeNode(on_set_balance=cancel.set)
    poller = Poller(1.0, cancel=cancel, sleep=lambda _seconds: None)
    flow = DepositFlow(
        DepositFlowConfig(), cast(NodeClient, node), account=_account(), poller=poller
    )

    with pytest.raises(FlowCancelledError):
        flow.run()

    assert node.events == ["set_balance"]
    assert node.sent == []
