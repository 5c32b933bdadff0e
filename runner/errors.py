# runner/errors.py
from typing import List


class SpecRunnerError(Exception):
    """Base class for errors raised to the caller of a spec run."""


class NoExamplesError(SpecRunnerError):
    pass


class ExampleNotFoundError(SpecRunnerError, LookupError):

    def __init__(self, name: str, available: List[str]):
        self.name = name
        self.available = list(available)
        super().__init__(
            f'Example "{name}" not found. Available: {", ".join(self.available)}'
        )


class SessionError(SpecRunnerError, RuntimeError):
    """Browser / automation session could not be set up."""


class SnapshotError(SpecRunnerError, RuntimeError):
    pass


class ConfigError(SpecRunnerError):
    pass
