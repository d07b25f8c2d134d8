"""Error type shared by the collector, generators and writers"""


class GenerationError(Exception):
    """Raised when a type cannot be collected, rendered or written."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message
