"""mpybox - MicroPython board provisioning tool."""

from importlib.metadata import distribution

from .models.results import ProvisionResult


__version__ = distribution(__package__ or "mpybox").version

__all__ = [
    "ProvisionResult",
    "__version__",
]

# Import CLI after setting __version__ to avoid circular imports
from .cli import app, main


__all__ += ["app", "main"]
