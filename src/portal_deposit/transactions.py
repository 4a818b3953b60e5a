"""Broadcast of signed transactions."""

from __future__ import annotations

import logging

from .exceptions import SubmissionError
from .node import NodeClient
from .types import SignedTransaction

logger = logging.getLogger(__name__)


class TransactionDispatcher:
    """Submit signed transactions to the node, once each."""

    def __init__(self, node: NodeClient) -> None:
        self._node = node

    def send(self, signed: SignedTransaction, *, action: str = "transaction") -> str:
        tx_hex = signed.hash_hex
        logger.debug("Dispatching %s %s", action, tx_hex)

        try:
            self._node.send_raw_transaction(signed.raw_transaction)
        except Exception as exc:
            raise SubmissionError(
                f"Failed to submit {action}: {exc}",
                request=signed.request,
                tx_hash=tx_hex,
                details={"endpoint": self._node.rpc_url, "error": str(exc)},
            ) from exc

        logger.info("%s sent: %s", action, tx_hex)
        return tx_hex
