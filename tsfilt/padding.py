import logging
from enum import Enum

import torch
from torch import Tensor
import torch.nn.functional as F

from .errors import InvalidPaddingError, UnknownPadTypeError, ZeroLengthInputError

logger = logging.getLogger(__name__)


class PadType(Enum):
    NONE = "none"
    ZERO = "zero"
    CONSTANT = "constant"
    PERIODIC = "periodic"
    SYMMETRIC = "symmetric"

    @classmethod
    def parse(cls, value) -> "PadType":
        """Map a configuration name (case-insensitive) or a member to a `PadType`."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.lower())
            except ValueError:
                pass
        raise UnknownPadTypeError(value)


def pad(x: Tensor, length: int, time_shift: int, pad_type: PadType) -> Tensor:
    """Extend a sequence along its first (time) dimension.

    With `PadType.NONE` only `time_shift` zero rows are appended for time
    alignment. Every other policy returns `2 * length + rows + time_shift`
    rows with the input starting at row `length`; the `length` rows on each
    side are filled according to the policy and the trailing `time_shift`
    rows stay zero.

    Args:
        x (Tensor): Input sequence, shape (N, C) or (N,).
        length (int): Number of boundary rows on each side.
        time_shift (int): Number of extra rows appended after the tail padding.
        pad_type (PadType): Boundary policy.

    Returns:
        Tensor: Padded sequence.
    """
    assert length >= 0, "Padding length must be non-negative."
    assert time_shift >= 0, "Time shift must be non-negative."

    if not isinstance(pad_type, PadType):
        raise UnknownPadTypeError(pad_type)

    rows = x.size(0)

    if pad_type is PadType.NONE:
        if time_shift > 0:
            return torch.cat([x, x.new_zeros((time_shift,) + x.shape[1:])], dim=0)
        return x

    if rows < 1:
        raise ZeroLengthInputError(rows, x.size(1) if x.dim() > 1 else 1)

    match pad_type:
        case PadType.ZERO:
            mode = "constant"
        case PadType.CONSTANT:
            mode = "replicate"
        case PadType.PERIODIC:
            if rows < length:
                raise InvalidPaddingError(pad_type.value, rows, length)
            mode = "circular"
        case PadType.SYMMETRIC:
            if rows < length + 1:
                raise InvalidPaddingError(pad_type.value, rows, length)
            # mirror without repeating the boundary sample
            mode = "reflect"

    if length > 0:
        # F.pad pads the last dimension of a (B, C, N) batch
        padded = F.pad(
            x.reshape(rows, -1).mT.unsqueeze(0), (length, length), mode=mode
        )
        padded = padded.squeeze(0).mT.reshape((-1,) + x.shape[1:])
    else:
        padded = x.clone()
    if time_shift > 0:
        padded = torch.cat(
            [padded, x.new_zeros((time_shift,) + x.shape[1:])], dim=0
        )

    logger.debug(
        "padded %d rows to %d (%s, length=%d, shift=%d)",
        rows,
        padded.size(0),
        pad_type.value,
        length,
        time_shift,
    )
    return padded


def trim(x: Tensor, length: int, time_shift: int, pad_type: PadType) -> Tensor:
    """Drop the boundary rows added by `pad`.

    The first `length + time_shift` and the last `length` rows are removed, so
    ``trim(pad(x, length, 0, pad_type), length, 0, pad_type)`` equals `x`. With
    a nonzero `time_shift` the result is `x` advanced by `time_shift` rows,
    which aligns the output of a causal filter whose zero-lag tap sits at
    index `time_shift`.

    Args:
        x (Tensor): Padded sequence, shape (N, C) or (N,).
        length (int): Number of boundary rows on each side.
        time_shift (int): Number of alignment rows.
        pad_type (PadType): Boundary policy used for padding.

    Returns:
        Tensor: Interior rows of `x`.
    """
    if not isinstance(pad_type, PadType):
        raise UnknownPadTypeError(pad_type)

    if pad_type is PadType.NONE:
        if time_shift > 0:
            return x[time_shift:].clone()
        return x

    assert (
        x.size(0) >= 2 * length + time_shift
    ), f"Cannot trim {2 * length + time_shift} rows from a sequence of {x.size(0)} rows."
    return x[length + time_shift : x.size(0) - length].clone()
