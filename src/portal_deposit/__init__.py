"""Portal deposit smoke flow.

Funds a throwaway account on a dev node, sends a plain transfer, waits for the
OptimismPortal contract to be deployed and submits a deposit through it,
blocking until each transaction is mined.
"""

from .config import DepositFlowConfig
from .exceptions import (
    DepositFlowError,
    FlowCancelledError,
    NetworkError,
    PollCancelledError,
    SigningError,
    SubmissionError,
    ValidationError,
)
from .flow import DepositFlow
from .node import NodeClient
from .polling import Poller, wait_for_contract, wait_for_receipt
from .portal import OptimismPortal
from .signer import TransactionSigner, build_transfer, generate_account, recover_sender
from .transactions import TransactionDispatcher
from .types import (
    DepositResult,
    FlowContext,
    SignedTransaction,
    TransactionRequest,
    TransactOpts,
)
from .utils import serialise_receipt, to_uint64

__version__ = "0.1.0"

__all__ = [
    # Flow
    "DepositFlow",
    "DepositFlowConfig",
    "NodeClient",
    "OptimismPortal",
    "Poller",
    "TransactionDispatcher",
    "TransactionSigner",
    # Types
    "DepositResult",
    "FlowContext",
    "SignedTransaction",
    "TransactionRequest",
    "TransactOpts",
    # Exceptions
    "DepositFlowError",
    "FlowCancelledError",
    "NetworkError",
    "PollCancelledError",
    "SigningError",
    "SubmissionError",
    "ValidationError",
    # Helpers
    "build_transfer",
    "generate_account",
    "recover_sender",
    "serialise_receipt",
    "to_uint64",
    "wait_for_contract",
    "wait_for_receipt",
]
