"""Errors raised while partitioning a program."""


class PartitionerError(Exception):
    """Base error for the partitioner."""

    def __init__(self, message: str, phase: str = "generation"):
        super().__init__(message)
        self.phase = phase


class SourceError(PartitionerError):
    """The input program could not be read."""

    def __init__(self, message: str):
        super().__init__(message, phase="loading")


class RegistryError(PartitionerError):
    """The tracker output is malformed or inconsistent."""

    def __init__(self, message: str):
        super().__init__(message, phase="registry")


class GenerationError(PartitionerError):
    """A generator precondition does not hold."""

    def __init__(self, message: str):
        super().__init__(message, phase="generation")
