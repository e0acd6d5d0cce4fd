import pathlib

from birdindexer.exceptions.base import BirdIndexerError


class BackupExists(BirdIndexerError):
    """
    Raised by `birdindexer database backup` if a file exists at the target path.
    """

    def __init__(self, path: pathlib.Path) -> None:
        self.path = path
        super().__init__(message=f"A backup at {path} already exists.")
