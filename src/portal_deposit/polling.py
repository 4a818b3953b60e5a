"""Blocking pollers that wait for on-chain state to appear."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from typing import TypeVar

from hexbytes import HexBytes
from web3 import Web3
from web3.types import TxReceipt

from .constants import DEFAULT_POLL_INTERVAL
from .exceptions import PollCancelledError
from .node import NodeClient

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Poller:
    """Retry a check on a fixed interval until it yields a truthy value.

    A check that raises is treated the same as one that returns nothing yet.
    ``timeout=None`` waits forever; the only way out of such a wait is the
    ``cancel`` event.
    """

    def __init__(
        self,
        interval: float = DEFAULT_POLL_INTERVAL,
        *,
        timeout: float | None = None,
        cancel: threading.Event | None = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.interval = interval
        self.timeout = timeout
        self.cancel = cancel
        self._sleep = sleep
        self._clock = clock

    def with_timeout(self, timeout: float | None) -> Poller:
        return Poller(
            self.interval,
            timeout=timeout,
            cancel=self.cancel,
            sleep=self._sleep,
            clock=self._clock,
        )

    def until(self, check: Callable[[], T | None], *, waiting: str, found: str) -> T:
        started = self._clock()
        attempt = 0

        while True:
            if self.cancel is not None and self.cancel.is_set():
                raise PollCancelledError(f"Cancelled after {attempt} attempts: {waiting}")

            attempt += 1
            try:
                result = check()
            except Exception as exc:
                logger.debug("Poll attempt %s failed: %s", attempt, exc)
                result = None

            if result:
                logger.info(found)
                return result

            logger.info(waiting)
            if self.timeout is not None and self._clock() - started >= self.timeout:
                raise TimeoutError(
                    f"Timed out after {self.timeout:.0f} seconds ({attempt} attempts): {waiting}"
                )

            self._sleep(self.interval)


def wait_for_contract(
    node: NodeClient, address: str, name: str, poller: Poller | None = None
) -> HexBytes:
    """Block until code is deployed at ``address``; returns the code."""

    poller = poller or Poller()
    target = Web3.to_checksum_address(address)
    return poller.until(
        lambda: node.get_code(target),
        waiting=f"waiting for contract [{name}] to be deployed",
        found=f"found contract [{name}]",
    )


def wait_for_receipt(
    node: NodeClient, tx_hash: HexBytes | str, name: str, poller: Poller | None = None
) -> TxReceipt:
    """Block until the node has a receipt for ``tx_hash``."""

    poller = poller or Poller()
    return poller.until(
        lambda: node.get_receipt(tx_hash),
        waiting=f"waiting for receipt [{name}] to be mined",
        found=f"found receipt [{name}]",
    )
