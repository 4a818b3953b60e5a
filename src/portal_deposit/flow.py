"""End-to-end deposit flow: fund, transfer, wait for the portal, deposit."""

from __future__ import annotations

import json
import logging
import threading
from typing import Any

import requests
from eth_account.signers.local import LocalAccount
from web3 import Web3
from web3.exceptions import Web3Exception
from web3.types import TxReceipt

from .config import DepositFlowConfig
from .constants import BURN_ADDRESS, PORTAL_NAME, TRANSFER_NONCE
from .exceptions import FlowCancelledError, NetworkError, SubmissionError
from .node import NodeClient
from .polling import Poller, wait_for_contract, wait_for_receipt
from .portal import OptimismPortal
from .signer import TransactionSigner, build_transfer, generate_account
from .transactions import TransactionDispatcher
from .types import DepositResult, FlowContext, SignedTransaction, TransactOpts
from .utils import serialise_receipt

logger = logging.getLogger(__name__)

# transport and JSON-RPC failures raised by web3 over HTTP
RPC_ERRORS = (requests.RequestException, Web3Exception, ValueError)


class DepositFlow:
    """Run the deposit smoke test against one node.

    Steps run strictly in order and raise on the first failure; deciding to
    exit the process is left to the caller. Setting ``cancel`` stops the flow
    before its next step, or inside a running poll.
    """

    def __init__(
        self,
        config: DepositFlowConfig,
        node: NodeClient,
        *,
        account: LocalAccount | None = None,
        poller: Poller | None = None,
        cancel: threading.Event | None = None,
    ) -> None:
        self._config = config
        self._node = node
        self._account = account
        self._poller = poller or Poller(config.poll_interval, cancel=cancel)
        self._cancel = cancel if cancel is not None else self._poller.cancel
        self._dispatcher = TransactionDispatcher(node)

    def run(self) -> DepositResult:
        account = self._account if self._account is not None else generate_account()
        logger.info("user address: %s", account.address)

        self._checkpoint("fund")
        self.fund(account)
        self._checkpoint("prepare")
        ctx = self.prepare(account)

        self._checkpoint("transfer")
        transfer = self.send_transfer(ctx)
        transfer_receipt = self.await_receipt(transfer, "transferTx")

        portal = self.connect_portal()

        self._checkpoint("deposit")
        deposit = self.send_deposit(ctx, portal)
        deposit_receipt = self.await_receipt(deposit, "depositTx")

        return DepositResult(
            account=account.address,
            transfer_tx_hash=transfer.hash_hex,
            deposit_tx_hash=deposit.hash_hex,
            transfer_receipt=serialise_receipt(transfer_receipt),
            deposit_receipt=serialise_receipt(deposit_receipt),
            report=self.report(deposit_receipt),
        )

    def _checkpoint(self, step: str) -> None:
        if self._cancel is not None and self._cancel.is_set():
            raise FlowCancelledError(f"Cancelled before {step}")

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------
    def fund(self, account: LocalAccount) -> None:
        self._node.set_balance(account.address, self._config.funding_balance)
        logger.info("funded %s with %s wei", account.address, self._config.funding_balance)

    def prepare(self, account: LocalAccount) -> FlowContext:
        """Fetch gas price and chain id; nothing is signed before this succeeds."""

        try:
            gas_price = self._node.gas_price()
            chain_id = self._node.chain_id()
        except RPC_ERRORS as exc:
            raise NetworkError(
                f"Failed to fetch gas price and chain id: {exc}",
                endpoint=self._node.rpc_url,
                details={"error": str(exc)},
            ) from exc

        logger.debug("chain id %s, gas price %s", chain_id, gas_price)
        return FlowContext(
            account=account,
            chain_id=chain_id,
            gas_price=gas_price,
            signer=TransactionSigner(account, chain_id),
        )

    def send_transfer(self, ctx: FlowContext) -> SignedTransaction:
        request = build_transfer(
            TRANSFER_NONCE,
            Web3.to_checksum_address(BURN_ADDRESS),
            self._config.transfer_value,
            ctx.gas_price,
            sender=ctx.address,
        )
        signed = ctx.signer.sign(request)
        self._dispatcher.send(signed, action="tx")
        return signed

    def connect_portal(self) -> OptimismPortal:
        portal_address = self._config.portal_address
        wait_for_contract(
            self._node,
            portal_address,
            PORTAL_NAME,
            self._poller.with_timeout(self._config.deployment_timeout),
        )
        portal = OptimismPortal(portal_address, self._node)
        logger.info("portal created")
        return portal

    def send_deposit(self, ctx: FlowContext, portal: OptimismPortal) -> SignedTransaction:
        try:
            nonce = self._node.get_nonce(ctx.address)
        except RPC_ERRORS as exc:
            raise NetworkError(
                f"err getting nonce: {exc}",
                endpoint=self._node.rpc_url,
                details={"address": ctx.address, "error": str(exc)},
            ) from exc
        logger.info("user nonce: %s", nonce)

        opts = TransactOpts(
            sender=ctx.address,
            signer=ctx.signer.sign_for,
            gas_price=ctx.gas_price,
            gas_limit=self._config.deposit_gas_limit,
            nonce=nonce,
            value=self._config.deposit_value,
        )

        try:
            return portal.deposit_transaction(
                opts,
                ctx.address,
                self._config.deposit_mint_value,
                self._config.deposit_l2_gas,
                False,
                b"",
            )
        except SubmissionError as exc:
            logger.error("deposit tx: %s", exc.request)
            raise

    def await_receipt(self, signed: SignedTransaction, name: str) -> TxReceipt:
        return wait_for_receipt(
            self._node,
            signed.hash,
            name,
            self._poller.with_timeout(self._config.receipt_timeout),
        )

    def report(self, receipt: TxReceipt) -> str:
        """Render the receipt as indented JSON; printing it is up to the caller."""

        rendered = format_receipt(receipt)
        logger.debug("deposit receipt:\n\n%s", rendered)
        return rendered


def format_receipt(receipt: Any) -> str:
    return json.dumps(serialise_receipt(receipt), indent=2, default=str)
