from birdindexer.exceptions.base import (
    BirdIndexerError,
    BirdIndexerTypeError,
    BirdIndexerValueError,
)
from birdindexer.exceptions.contract import ContractViewError, ContractViewReverted
from birdindexer.exceptions.database import BackupExists
from birdindexer.exceptions.engine import EventOrderingError

from . import contract, database, engine

__all__ = (
    "BackupExists",
    "BirdIndexerError",
    "BirdIndexerTypeError",
    "BirdIndexerValueError",
    "ContractViewError",
    "ContractViewReverted",
    "EventOrderingError",
    "contract",
    "database",
    "engine",
)
