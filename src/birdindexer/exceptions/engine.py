from birdindexer.exceptions.base import BirdIndexerError


class EventOrderingError(BirdIndexerError):
    """
    Raised when an event is delivered at or before the position of the previously processed event.
    """

    def __init__(
        self,
        previous: tuple[int, int, int],
        current: tuple[int, int, int],
    ) -> None:
        self.previous = previous
        self.current = current
        super().__init__(
            message=f"Event at position {current} was delivered after position {previous}."
        )
