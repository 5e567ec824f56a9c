"""Advisory result types - Pure data structures.

Every public engine operation that touches a feed returns one of these.
They are immutable and carry either ranked entries or the failure reason.
"""

from dataclasses import dataclass
from typing import Any, Union

from stormhaven.core.errors import StormHavenError


SUCCESS = "success"
PARTIAL_FAILURE = "partial_failure"
FAILURE = "failure"


@dataclass(frozen=True)
class Success:
    """All requested data was fetched.

    Attributes:
        entries: Ranked entries or recommendation strings, in order
    """
    entries: tuple[Any, ...] = ()

    status = SUCCESS

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class PartialFailure:
    """Some of the requested data was fetched.

    Attributes:
        entries: The successful subset, in order
        errors: What failed
    """
    entries: tuple[Any, ...]
    errors: tuple[StormHavenError, ...]

    status = PARTIAL_FAILURE

    @property
    def ok(self) -> bool:
        return True

    @property
    def error_summary(self) -> str:
        return "; ".join(str(e) for e in self.errors)


@dataclass(frozen=True)
class Failure:
    """Nothing could be fetched.

    Attributes:
        error: The underlying reason
    """
    error: StormHavenError

    status = FAILURE

    @property
    def ok(self) -> bool:
        return False

    @property
    def entries(self) -> tuple[Any, ...]:
        return ()


AdvisoryResult = Union[Success, PartialFailure, Failure]
