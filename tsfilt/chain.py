import logging
import torch
from torch import Tensor
from contextlib import contextmanager
from typing import Iterable, Iterator

from .base import DigitalFilter

logger = logging.getLogger(__name__)


@contextmanager
def _stage(index: int, member: DigitalFilter):
    try:
        yield
    except Exception as e:
        logger.debug("stage %d (%s) failed: %s", index, type(member).__name__, e)
        e.add_note(f"raised by stage {index} ({type(member).__name__}) of the filter chain")
        raise


class FilterChain:
    """Ordered sequence of filters applied one after another.

    The output of each member is the input of the next one, and the combined
    frequency response is the product of the members' responses.

    Args:
        filters (iterable of DigitalFilter): Members in application order.
    """

    def __init__(self, filters: Iterable[DigitalFilter] = ()):
        self._filters = tuple(filters)

    def __len__(self) -> int:
        return len(self._filters)

    def __iter__(self) -> Iterator[DigitalFilter]:
        return iter(self._filters)

    def __getitem__(self, index: int) -> DigitalFilter:
        return self._filters[index]

    def __repr__(self) -> str:
        return f"FilterChain({list(self._filters)!r})"

    def warmup(self) -> int:
        return max((f.warmup() for f in self._filters), default=0)

    def filter(self, x: Tensor) -> Tensor:
        """Apply all members in order.

        Args:
            x (Tensor): Input sequence, shape (N, C) or (N,).

        Returns:
            Tensor: Output of the last member, or a copy of x for an empty chain.
        """
        if not self._filters:
            return x.clone()

        y = x
        for i, f in enumerate(self._filters):
            logger.debug("stage %d: %r on %s", i, f, tuple(y.shape))
            with _stage(i, f):
                y = f.filter(y)
        return y

    def frequency_response(self, length: int) -> Tensor:
        """Product of the members' responses on the DFT grid of `length` points.

        Returns:
            Tensor: Complex tensor of shape ((length + 2) // 2,), all ones for
            an empty chain.
        """
        response = torch.ones((length + 2) // 2, dtype=torch.complex128)
        for i, f in enumerate(self._filters):
            with _stage(i, f):
                response = response * f.frequency_response(length)
        return response
