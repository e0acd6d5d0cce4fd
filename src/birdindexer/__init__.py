from .checksum_cache import get_checksum_address
from .config import settings
from .version import __version__

# isort: split

from .contract_view import ContractViewer, Web3ContractViewer
from .deployments import BirdDeployment, EthereumMainnetBird
from .engine import ProjectionEngine
from .logging import logger
from .repository import EntityRepository, SessionRepository
from .types import Found, Skip
from .verbose import VerboseConfig

# isort: split

from . import events, exceptions, handlers, numeric

__all__ = (
    "BirdDeployment",
    "ContractViewer",
    "EntityRepository",
    "EthereumMainnetBird",
    "Found",
    "ProjectionEngine",
    "SessionRepository",
    "Skip",
    "VerboseConfig",
    "Web3ContractViewer",
    "__version__",
    "events",
    "exceptions",
    "get_checksum_address",
    "handlers",
    "logger",
    "numeric",
    "settings",
)
