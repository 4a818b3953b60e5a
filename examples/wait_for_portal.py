"""Example: wait (with a deadline) for the portal to be deployed, then fund an account."""

from __future__ import annotations

import logging
import os

from dotenv import load_dotenv

from portal_deposit import (
    DepositFlowConfig,
    NodeClient,
    Poller,
    generate_account,
    wait_for_contract,
)

load_dotenv()

logging.basicConfig(
    level=os.getenv("LOGLEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

logger = logging.getLogger("wait_for_portal")


def main() -> None:
    config = DepositFlowConfig.from_env()
    node = NodeClient(config.node_url, request_timeout=config.request_timeout)

    try:
        logger.info("Chain id: %s", node.chain_id())
        wait_for_contract(
            node,
            config.portal_address,
            "OptimismPortal",
            Poller(config.poll_interval, timeout=config.deployment_timeout or 60.0),
        )

        account = generate_account()
        node.set_balance(account.address, config.funding_balance)
        logger.info("Funded %s", account.address)
    finally:
        node.close()


if __name__ == "__main__":
    main()
