import logging
import torch
from torch import Tensor
from typing import Sequence, Union

from ..padding import PadType, pad, trim
from ..errors import InsufficientInputLengthError, ResponseLengthTooShortError

logger = logging.getLogger(__name__)

BLOCK_SIZE = 64

Coefficients = Union[Tensor, Sequence[float]]


def banded(c: Tensor, block_size: int) -> Tensor:
    """Stack `block_size` copies of `c`, each shifted down by one row.

    Args:
        c (Tensor): Coefficients, shape (M,).
        block_size (int): Number of columns.

    Returns:
        Tensor: Banded Toeplitz matrix of shape (M + block_size - 1, block_size)
        with ``out[r, k] = c[r - k]`` inside the band and zero elsewhere.
    """
    assert c.dim() == 1, "Coefficients must be 1D."
    M = c.size(0)
    lags = torch.arange(M + block_size - 1, device=c.device).unsqueeze(
        1
    ) - torch.arange(block_size, device=c.device)
    band = (lags >= 0) & (lags < M)
    return torch.where(band, c[lags.clamp(0, M - 1)], c.new_zeros(()))


def block_fir(b: Tensor, x: Tensor, block_size: int) -> Tensor:
    """Causal FIR filtering with zero initial state, evaluated block-wise.

    Every block of `block_size` input rows is multiplied by the banded matrix
    built from `b` in one batched product; the partial outputs that spill into
    the following `len(b) - 1` rows are overlap-added.

    Args:
        b (Tensor): Feed-forward coefficients, shape (M,).
        x (Tensor): Input signal, shape (N, C).
        block_size (int): Number of rows per block.

    Returns:
        Tensor: Filtered signal, shape (N, C).
    """
    assert x.dim() == 2, "Input signal x must be 2D."
    N, C = x.shape
    num_blocks = -(-N // block_size)

    B = banded(b, block_size)
    blocks = torch.cat(
        [x, x.new_zeros((num_blocks * block_size - N, C))], dim=0
    ).unflatten(0, (num_blocks, block_size))
    partial = B @ blocks

    idx = (
        torch.arange(num_blocks, device=x.device).unsqueeze(1) * block_size
        + torch.arange(B.size(0), device=x.device)
    ).flatten()
    y = x.new_zeros((num_blocks * block_size + B.size(0) - 1, C)).index_add(
        0, idx, partial.flatten(0, 1)
    )
    return y[:N]


def block_allpole(a: Tensor, x: Tensor, block_size: int) -> Tensor:
    """Solve ``sum_j a[j] y[n - j] = x[n]`` with zero initial state, block by block.

    Inside a block the recursion is a lower-triangular banded system. The last
    ``len(a) - 1`` outputs before a block (which may span several earlier
    blocks when the feedback order exceeds `block_size`) couple into it, so
    blocks are solved in increasing time order.

    Args:
        a (Tensor): Feedback coefficients with ``a[0] == 1``, shape (P,).
        x (Tensor): Right-hand side (usually the FIR output), shape (N, C).
        block_size (int): Number of rows per block.

    Returns:
        Tensor: Output signal, shape (N, C).
    """
    assert x.dim() == 2, "Input signal x must be 2D."
    N = x.size(0)
    order = a.size(0) - 1
    if order == 0:
        return x.clone()

    A0 = banded(a, block_size)[:block_size]
    # coupling[r, k] = a[r + order - k]: weight of the k-th of the last `order` outputs
    coupling = banded(a, order)[order:]

    outputs = []
    history = x[:0]
    for start in range(0, N, block_size):
        cols = min(N - start, block_size)
        rhs = x[start : start + cols]
        if outputs:
            m = min(order, cols)
            h = history.size(0)
            rhs = torch.cat(
                [rhs[:m] - coupling[:m, order - h :] @ history, rhs[m:]], dim=0
            )
        y = torch.linalg.solve_triangular(A0[:cols, :cols], rhs, upper=False)
        outputs.append(y)
        history = torch.cat([history, y], dim=0)[-order:]
    return torch.cat(outputs, dim=0)


def _reflect(v: Tensor) -> Tensor:
    # v[k] -> v[(-k) mod n]
    return v.flip(0).roll(1, 0)


class ARMAFilter:
    """Generic ARMA filter defined by the difference equation

    ``sum_j an[j] y[n - j] = sum_i bn[i] x[n - i + bn_start_index]``

    with ``an[0] == 1``. ``bn[bn_start_index]`` is aligned with the current
    sample, so the taps before it act on future samples.

    Args:
        bn (Tensor or sequence): Feed-forward coefficients, shape (Q,).
        an (Tensor or sequence): Feedback coefficients with ``an[0] == 1``, shape (P,).
            Default is ``[1]`` (FIR filter).
        bn_start_index (int): Index of the zero-lag tap in `bn`. Default is 0.
        backward (bool): Apply the time-reversed filter. Default is False.
        in_frequency_domain (bool): Evaluate via FFT instead of the time-domain
            block recursion. The padded length must be long enough to avoid
            circular wraparound. Default is False.
        pad_type (PadType or str): Boundary policy for the warmup rows. Default is `none`.
    """

    def __init__(
        self,
        bn: Coefficients,
        an: Coefficients = (1.0,),
        bn_start_index: int = 0,
        backward: bool = False,
        in_frequency_domain: bool = False,
        pad_type: Union[PadType, str] = PadType.NONE,
    ):
        bn = torch.as_tensor(bn, dtype=torch.float64).clone()
        an = torch.as_tensor(an, dtype=torch.float64).clone()
        assert bn.dim() == 1 and bn.numel() > 0, "bn must be a non-empty 1D sequence."
        assert an.dim() == 1 and an.numel() > 0, "an must be a non-empty 1D sequence."
        assert (
            0 <= bn_start_index < bn.numel()
        ), f"bn_start_index must be in [0, {bn.numel()}), got {bn_start_index}."
        if an[0] != 1:
            raise ValueError(
                f"an[0] must be 1 (normalize bn and an by an[0]), got {an[0].item()}."
            )

        self.bn = bn
        self.an = an
        self.bn_start_index = int(bn_start_index)
        self.backward = bool(backward)
        self.in_frequency_domain = bool(in_frequency_domain)
        self.pad_type = PadType.parse(pad_type)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(bn={self.bn.tolist()}, an={self.an.tolist()}, "
            f"bn_start_index={self.bn_start_index}, backward={self.backward}, "
            f"in_frequency_domain={self.in_frequency_domain}, "
            f"pad_type={self.pad_type.value!r})"
        )

    def warmup(self) -> int:
        """Number of boundary rows needed to cover the lead/lag of `bn` and to
        let the recursion settle.

        The settling term is three times the feedback order ``len(an) - 1``,
        not three times ``len(an)``, so a pure FIR filter needs no extra rows.
        """
        Q = self.bn.size(0)
        s = self.bn_start_index
        return max(Q - s - 1, s, 3 * (self.an.size(0) - 1))

    def filter(self, x: Tensor) -> Tensor:
        """Filter a sequence along its first dimension.

        Args:
            x (Tensor): Input sequence, shape (N, C) or (N,).

        Returns:
            Tensor: Filtered sequence with the same shape as x.
        """
        squeeze_last = x.dim() == 1
        if squeeze_last:
            x = x.unsqueeze(-1)
        elif x.dim() != 2:
            raise ValueError("Input sequence x must be 1D or 2D.")
        if not x.is_floating_point():
            x = x.to(torch.get_default_dtype())

        warmup = self.warmup()
        if x.size(0) < warmup:
            raise InsufficientInputLengthError(x.size(0), warmup)

        if self.in_frequency_domain:
            y = self._fs_filter(x, warmup)
        else:
            y = self._block_filter(x, warmup)
        return y.squeeze(-1) if squeeze_last else y

    def _block_filter(self, x: Tensor, warmup: int) -> Tensor:
        if self.backward:
            x = x.flip(0)

        padded = pad(x, warmup, self.bn_start_index, self.pad_type)
        if padded.size(0) == 0:
            return padded.clone()

        block_size = min(BLOCK_SIZE, padded.size(0))
        logger.debug(
            "time-domain filtering of %d rows in blocks of %d",
            padded.size(0),
            block_size,
        )
        y = block_fir(self.bn.to(padded), padded, block_size)
        if self.an.size(0) > 1:
            y = block_allpole(self.an.to(padded), y, block_size)

        y = trim(y, warmup, self.bn_start_index, self.pad_type)
        return y.flip(0) if self.backward else y

    def _fs_filter(self, x: Tensor, warmup: int) -> Tensor:
        # the circular alignment of the response already centres lag 0
        padded = pad(x, warmup, 0, self.pad_type)
        n = padded.size(0)
        if n == 0:
            return padded.clone()

        # the transform must be at least as long as the coefficient support
        length = max(n, self.bn.size(0), self.an.size(0))
        if length > n:
            padded = torch.cat(
                [padded, padded.new_zeros((length - n,) + padded.shape[1:])], dim=0
            )

        logger.debug("frequency-domain filtering of %d rows", length)
        X = torch.fft.rfft(padded, dim=0)
        H = self.frequency_response(length).to(X)
        y = torch.fft.irfft(X * H.unsqueeze(-1), n=length, dim=0)[:n]
        return trim(y, warmup, 0, self.pad_type)

    def frequency_response(self, length: int) -> Tensor:
        """Evaluate the transfer function on the DFT grid of `length` points.

        Args:
            length (int): Number of samples of the underlying real signal.

        Returns:
            Tensor: Complex response of shape (length // 2 + 1,). Bins where
            the feedback spectrum vanishes are set to 1.
        """
        Q = self.bn.size(0)
        P = self.an.size(0)
        if length < max(Q, P):
            raise ResponseLengthTooShortError(length, max(Q, P))

        s = self.bn_start_index
        b_pad = self.bn.new_zeros(length)
        b_pad[: Q - s] = self.bn[s:]
        if s > 0:
            b_pad[length - s :] = self.bn[:s]

        a_pad = self.an.new_zeros(length)
        a_pad[:P] = self.an

        if self.backward:
            b_pad = _reflect(b_pad)
            a_pad = _reflect(a_pad)

        A = torch.fft.rfft(a_pad)
        B = torch.fft.rfft(b_pad)
        nonzero = A.abs() > 0
        return torch.where(
            nonzero, B / torch.where(nonzero, A, torch.ones_like(A)), torch.ones_like(B)
        )
