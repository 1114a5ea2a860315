import torch
from torch import Tensor
from typing import Union

from .arma import ARMAFilter
from ..base import DigitalFilter
from ..padding import PadType, pad
from ..errors import InsufficientInputLengthError


class MovingAverage(ARMAFilter):
    """Moving average (boxcar) filter of `length` taps.

    Args:
        length (int): Number of averaged samples.
        centered (bool): Align the window centre with the current sample,
            otherwise average the current and the ``length - 1`` past samples.
            For an even `length` the window extends one sample further into
            the past. Default is True.
        backward, in_frequency_domain, pad_type: See `ARMAFilter`.
    """

    def __init__(
        self,
        length: int,
        centered: bool = True,
        backward: bool = False,
        in_frequency_domain: bool = False,
        pad_type: Union[PadType, str] = PadType.NONE,
    ):
        assert length >= 1, "Moving average length must be at least 1."
        super().__init__(
            torch.full((length,), 1.0 / length, dtype=torch.float64),
            bn_start_index=(length - 1) // 2 if centered else 0,
            backward=backward,
            in_frequency_domain=in_frequency_domain,
            pad_type=pad_type,
        )


class Lag(ARMAFilter):
    """Shift a sequence by a whole number of samples.

    A positive `lag` delays the sequence (``y[n] = x[n - lag]``), a negative
    one advances it (``y[n] = x[n + |lag|]``).
    """

    def __init__(
        self,
        lag: int,
        backward: bool = False,
        in_frequency_domain: bool = False,
        pad_type: Union[PadType, str] = PadType.NONE,
    ):
        bn = torch.zeros(abs(lag) + 1, dtype=torch.float64)
        if lag >= 0:
            bn[lag] = 1.0
            bn_start_index = 0
        else:
            bn[0] = 1.0
            bn_start_index = -lag
        super().__init__(
            bn,
            bn_start_index=bn_start_index,
            backward=backward,
            in_frequency_domain=in_frequency_domain,
            pad_type=pad_type,
        )


class Median:
    """Running median over a centred window of odd `length`.

    With `PadType.NONE` the windows at both ends are truncated to the samples
    available. The filter is not linear, so its frequency response is
    reported as all ones.
    """

    def __init__(
        self, length: int, pad_type: Union[PadType, str] = PadType.CONSTANT
    ):
        assert (
            length >= 1 and length % 2 == 1
        ), f"Median window length must be a positive odd number, got {length}."
        self.length = length
        self.pad_type = PadType.parse(pad_type)

    def __repr__(self) -> str:
        return f"Median(length={self.length}, pad_type={self.pad_type.value!r})"

    def warmup(self) -> int:
        return self.length // 2

    def filter(self, x: Tensor) -> Tensor:
        squeeze_last = x.dim() == 1
        if squeeze_last:
            x = x.unsqueeze(-1)
        elif x.dim() != 2:
            raise ValueError("Input sequence x must be 1D or 2D.")
        if not x.is_floating_point():
            x = x.to(torch.get_default_dtype())

        half = self.warmup()
        if x.size(0) < half:
            raise InsufficientInputLengthError(x.size(0), half)
        if x.size(0) == 0:
            y = x.clone()
            return y.squeeze(-1) if squeeze_last else y

        if self.pad_type is PadType.NONE:
            edge = x.new_full((half, x.size(1)), float("nan"))
            padded = torch.cat([edge, x, edge], dim=0)
        else:
            padded = pad(x, half, 0, self.pad_type)

        windows = padded.unfold(0, self.length, 1)
        if self.pad_type is PadType.NONE:
            y = windows.nanmedian(dim=-1).values
        else:
            y = windows.median(dim=-1).values
        return y.squeeze(-1) if squeeze_last else y

    def frequency_response(self, length: int) -> Tensor:
        return torch.ones(length // 2 + 1, dtype=torch.complex128)


class ReduceFilterOutput:
    """Subtract the output of a filter from its input (``y = x - f(x)``).

    Args:
        filters (DigitalFilter): Filter or `FilterChain` whose output is removed.
    """

    def __init__(self, filters: DigitalFilter):
        self.filters = filters

    def __repr__(self) -> str:
        return f"ReduceFilterOutput({self.filters!r})"

    def warmup(self) -> int:
        return self.filters.warmup()

    def filter(self, x: Tensor) -> Tensor:
        if not x.is_floating_point():
            x = x.to(torch.get_default_dtype())
        return x - self.filters.filter(x)

    def frequency_response(self, length: int) -> Tensor:
        return 1 - self.filters.frequency_response(length)
