from typing import Protocol, runtime_checkable

from torch import Tensor


@runtime_checkable
class DigitalFilter(Protocol):
    """Capability shared by every filter that can be placed in a `FilterChain`."""

    def filter(self, x: Tensor) -> Tensor:
        """Filter a sequence of shape (N, C) or (N,) along its first dimension."""
        ...

    def frequency_response(self, length: int) -> Tensor:
        """One-sided complex response of shape (length // 2 + 1,)."""
        ...

    def warmup(self) -> int: ...
