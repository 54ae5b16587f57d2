from enum import Enum


class Lifecycle(str, Enum):
    """Defines how often a binding produces a new instance.

    Attributes:
        SINGLETON: One instance, built on first use and reused forever.
        TRANSIENT: New instance created on each resolution.
    """

    SINGLETON = "singleton"
    TRANSIENT = "transient"

    def __str__(self) -> str:
        return self.value
