"""Command-line entry point for the deposit smoke flow."""

from __future__ import annotations

import logging
import os
import signal
import sys
import threading

from dotenv import load_dotenv

from .config import DepositFlowConfig
from .exceptions import DepositFlowError, FlowCancelledError
from .flow import DepositFlow
from .node import NodeClient
from .polling import Poller

logger = logging.getLogger("portal_deposit")

LOG_FORMAT = "[%(asctime)s.%(msecs)03d] %(message)s"
LOG_DATEFMT = "%H:%M:%S"


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(
        level=(level or os.getenv("LOGLEVEL", "INFO")).upper(),
        format=LOG_FORMAT,
        datefmt=LOG_DATEFMT,
        stream=sys.stdout,
    )


def main() -> int:
    """Run one deposit flow; returns the process exit status."""
    load_dotenv()
    configure_logging()

    try:
        config = DepositFlowConfig.from_env()
    except DepositFlowError as exc:
        logger.error("invalid configuration: %s", exc)
        return 1

    # SIGTERM stops the flow before its next step, or inside a running poll
    cancel = threading.Event()
    previous_handler = signal.signal(signal.SIGTERM, lambda *_: cancel.set())

    node = NodeClient(
        config.node_url,
        request_timeout=config.request_timeout,
        balance_method=config.balance_method,
    )
    flow = DepositFlow(
        config, node, poller=Poller(config.poll_interval, cancel=cancel), cancel=cancel
    )

    try:
        result = flow.run()
    except FlowCancelledError as exc:
        logger.error("terminated: %s", exc)
        return 143
    except (DepositFlowError, TimeoutError) as exc:
        logger.error("%s", exc)
        return 1
    except KeyboardInterrupt:
        logger.error("interrupted")
        return 130
    finally:
        node.close()
        signal.signal(signal.SIGTERM, previous_handler)

    # the receipt dump is the run's output, independent of LOGLEVEL
    print(f"deposit receipt:\n\n{result.report}", flush=True)
    return 0


if __name__ == "__main__":
    sys.exit(main())
