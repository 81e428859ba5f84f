"""Protocol definitions for mpybox collaborators.

These protocols use Python's typing.Protocol system with the
@runtime_checkable decorator to enable both static type checking and
runtime isinstance() checks against test doubles.
"""

from .flash_protocols import FirmwareFlasherProtocol
from .process_protocols import OutputSinkProtocol, ProcessRunnerProtocol


__all__ = [
    "FirmwareFlasherProtocol",
    "OutputSinkProtocol",
    "ProcessRunnerProtocol",
]
