"""Board operations: raw REPL access, firmware flashing and provisioning."""

from mpybox.board.decision import SpaceDecision, evaluate_space, should_reflash
from mpybox.board.flasher_methods import (
    BlockEraseFlasher,
    SinglePassFlasher,
    create_firmware_flasher,
)
from mpybox.board.orchestrator import ProvisioningOrchestrator
from mpybox.board.provision_state import ProvisionContext, ProvisionState
from mpybox.board.repl import RawReplClient
from mpybox.board.service import ProvisionService, create_provision_service


__all__ = [
    "SpaceDecision",
    "evaluate_space",
    "should_reflash",
    "BlockEraseFlasher",
    "SinglePassFlasher",
    "create_firmware_flasher",
    "ProvisioningOrchestrator",
    "ProvisionContext",
    "ProvisionState",
    "RawReplClient",
    "ProvisionService",
    "create_provision_service",
]
