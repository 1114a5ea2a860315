import pytest
import numpy as np
import torch
from scipy import signal

from tsfilt.lti import ARMAFilter, banded, block_fir, block_allpole
from tsfilt.padding import PadType
from tsfilt.errors import InsufficientInputLengthError, ResponseLengthTooShortError


def _generate_a(den_order: int) -> np.ndarray:
    """Generate stable feedback coefficients with a leading 1"""
    num_cmplx_poles = den_order // 2
    num_real_poles = den_order - 2 * num_cmplx_poles

    cmplx_poles = np.random.rand(num_cmplx_poles) ** 0.5 * 0.9 * np.exp(
        1j * np.random.rand(num_cmplx_poles) * 2 * np.pi
    )
    real_poles = (np.random.rand(num_real_poles) * 1.8 - 0.9) + 0j
    roots = np.concatenate([cmplx_poles, cmplx_poles.conj(), real_poles])
    return np.poly(roots).real.copy()


ALL_PAD_TYPES = [
    PadType.NONE,
    PadType.ZERO,
    PadType.CONSTANT,
    PadType.PERIODIC,
    PadType.SYMMETRIC,
]


@pytest.mark.parametrize(
    ("bn_len", "bn_start_index", "an_len", "expected"),
    [
        (5, 2, 1, 2),
        (3, 1, 1, 1),
        (1, 0, 1, 0),
        (7, 0, 1, 6),
        (7, 6, 1, 6),
        (3, 0, 3, 6),
    ],
)
def test_warmup(bn_len, bn_start_index, an_len, expected):
    an = [1.0] + [0.1] * (an_len - 1)
    filt = ARMAFilter([1.0] * bn_len, an, bn_start_index=bn_start_index)
    assert filt.warmup() == expected


def test_banded():
    c = torch.tensor([1.0, 2.0, 3.0])
    expected = torch.tensor(
        [
            [1.0, 0.0, 0.0, 0.0],
            [2.0, 1.0, 0.0, 0.0],
            [3.0, 2.0, 1.0, 0.0],
            [0.0, 3.0, 2.0, 1.0],
            [0.0, 0.0, 3.0, 2.0],
            [0.0, 0.0, 0.0, 3.0],
        ]
    )
    assert torch.equal(banded(c, 4), expected)


@pytest.mark.parametrize("N", [1, 7, 64, 100])
@pytest.mark.parametrize("block_size", [1, 7, 64])
def test_block_fir(N, block_size):
    block_size = min(block_size, N)
    b = np.random.randn(5)
    x = np.random.randn(N, 3)
    y = block_fir(torch.from_numpy(b), torch.from_numpy(x), block_size)
    y_scipy = signal.lfilter(b, [1.0], x, axis=0)
    assert np.allclose(y.numpy(), y_scipy), np.max(np.abs(y.numpy() - y_scipy))


@pytest.mark.parametrize("N", [3, 64, 130])
@pytest.mark.parametrize("block_size", [2, 16, 64])
@pytest.mark.parametrize("order", [1, 2, 5])
def test_block_allpole(N, block_size, order):
    block_size = min(block_size, N)
    a = _generate_a(order)
    x = np.random.randn(N, 2)
    y = block_allpole(torch.from_numpy(a), torch.from_numpy(x), block_size)
    y_scipy = signal.lfilter([1.0], a, x, axis=0)
    assert np.allclose(y.numpy(), y_scipy), np.max(np.abs(y.numpy() - y_scipy))


@pytest.mark.parametrize("in_frequency_domain", [False, True])
def test_centered_moving_average(in_frequency_domain):
    x = torch.arange(1, 11).double()
    filt = ARMAFilter(
        [1 / 3, 1 / 3, 1 / 3],
        [1.0],
        bn_start_index=1,
        in_frequency_domain=in_frequency_domain,
        pad_type="constant",
    )
    assert filt.warmup() == 1

    y = filt.filter(x)
    expected = torch.tensor([4 / 3, 2, 3, 4, 5, 6, 7, 8, 9, 29 / 3]).double()
    assert y.shape == x.shape
    assert torch.allclose(y, expected), y


@pytest.mark.parametrize("pad_type", ALL_PAD_TYPES)
@pytest.mark.parametrize("in_frequency_domain", [False, True])
@pytest.mark.parametrize("backward", [False, True])
def test_identity(pad_type, in_frequency_domain, backward):
    x = torch.randn(20, 3).double()
    filt = ARMAFilter(
        [1.0],
        [1.0],
        backward=backward,
        in_frequency_domain=in_frequency_domain,
        pad_type=pad_type,
    )
    y = filt.filter(x)
    assert y.shape == x.shape
    assert torch.allclose(y, x), torch.max(torch.abs(y - x))


@pytest.mark.parametrize("N", [12, 64, 65, 200])
@pytest.mark.parametrize("pad_type", [PadType.NONE, PadType.ZERO])
@pytest.mark.parametrize("backward", [False, True])
def test_lfilter_equivalence(N, pad_type, backward):
    b = np.random.randn(5)
    a = _generate_a(4)
    x = np.random.randn(N, 3)

    filt = ARMAFilter(b, a, backward=backward, pad_type=pad_type)
    y = filt.filter(torch.from_numpy(x))

    if backward:
        y_scipy = signal.lfilter(b, a, x[::-1], axis=0)[::-1]
    else:
        y_scipy = signal.lfilter(b, a, x, axis=0)
    assert np.allclose(y.numpy(), y_scipy), np.max(np.abs(y.numpy() - y_scipy))


@pytest.mark.parametrize("pad_type", [PadType.NONE, PadType.ZERO])
def test_acausal_taps(pad_type):
    b = np.random.randn(5)
    x = np.random.randn(40, 2)

    filt = ARMAFilter(b, bn_start_index=2, pad_type=pad_type)
    y = filt.filter(torch.from_numpy(x))

    # y[n] = sum_i b[i] x[n - i + 2] with zeros outside the sequence
    y_scipy = signal.lfilter(b, [1.0], np.concatenate([x, np.zeros((2, 2))]), axis=0)[
        2:
    ]
    assert np.allclose(y.numpy(), y_scipy), np.max(np.abs(y.numpy() - y_scipy))


@pytest.mark.parametrize(
    "pad_type",
    [PadType.ZERO, PadType.CONSTANT, PadType.PERIODIC, PadType.SYMMETRIC],
)
@pytest.mark.parametrize("bn_start_index", [0, 2, 6])
@pytest.mark.parametrize("backward", [False, True])
def test_time_and_frequency_domain_agree(pad_type, bn_start_index, backward):
    b = np.random.randn(7)
    x = torch.randn(50, 4).double()

    kwargs = dict(bn_start_index=bn_start_index, backward=backward, pad_type=pad_type)
    y_time = ARMAFilter(b, **kwargs).filter(x)
    y_freq = ARMAFilter(b, in_frequency_domain=True, **kwargs).filter(x)
    assert y_time.shape == y_freq.shape == x.shape
    assert torch.allclose(y_time, y_freq), torch.max(torch.abs(y_time - y_freq))


@pytest.mark.parametrize("length", [8, 9, 100])
@pytest.mark.parametrize("bn_start_index", [0, 1, 3])
@pytest.mark.parametrize("backward", [False, True])
def test_frequency_response(length, bn_start_index, backward):
    b = np.random.randn(4)
    a = _generate_a(2)
    filt = ARMAFilter(b, a, bn_start_index=bn_start_index, backward=backward)

    H = filt.frequency_response(length)
    assert H.shape == (length // 2 + 1,)

    w = 2 * np.pi * np.arange(length // 2 + 1) / length
    _, h = signal.freqz(b, a, worN=w)
    h = h * np.exp(1j * w * bn_start_index)
    if backward:
        h = h.conj()
    assert np.allclose(H.numpy(), h), np.max(np.abs(H.numpy() - h))


def test_frequency_response_too_short():
    filt = ARMAFilter([1.0, 1.0, 1.0], [1.0, 0.5])
    with pytest.raises(ResponseLengthTooShortError) as excinfo:
        filt.frequency_response(2)
    assert excinfo.value.length == 2
    assert excinfo.value.minimum == 3
    assert filt.frequency_response(3).shape == (2,)


def test_frequency_response_zero_denominator():
    filt = ARMAFilter([1.0], [1.0, 1.0])
    H = filt.frequency_response(2)
    assert torch.equal(H, torch.tensor([0.5, 1.0], dtype=torch.complex128))

    H = filt.frequency_response(10)
    assert torch.all(torch.isfinite(H.abs()))


def test_insufficient_input_length():
    filt = ARMAFilter([1.0], [1.0, 0.5, 0.25])
    with pytest.raises(InsufficientInputLengthError) as excinfo:
        filt.filter(torch.randn(5, 2))
    assert excinfo.value.rows == 5
    assert excinfo.value.warmup == 6


def test_unnormalized_an():
    with pytest.raises(ValueError):
        ARMAFilter([1.0], [2.0, 0.5])


@pytest.mark.parametrize("bn_start_index", [-1, 3])
def test_invalid_start_index(bn_start_index):
    with pytest.raises(AssertionError):
        ARMAFilter([1.0, 1.0, 1.0], bn_start_index=bn_start_index)


@pytest.mark.parametrize("in_frequency_domain", [False, True])
def test_dtype_and_shape(in_frequency_domain):
    filt = ARMAFilter(
        [0.5, 0.5],
        [1.0, -0.3],
        in_frequency_domain=in_frequency_domain,
        pad_type="symmetric",
    )
    x = torch.randn(30, 2)
    y = filt.filter(x)
    assert y.dtype == torch.float32
    assert y.shape == (30, 2)

    y = filt.filter(torch.arange(30))
    assert y.is_floating_point()
    assert y.shape == (30,)

    with pytest.raises(ValueError):
        filt.filter(torch.randn(30, 2, 2))


def test_columns_are_independent():
    filt = ARMAFilter([0.2, 0.3, 0.5], [1.0, -0.4], pad_type="constant")
    x = torch.randn(80, 3).double()
    y = filt.filter(x)
    for k in range(3):
        assert torch.allclose(y[:, k], filt.filter(x[:, k]))


@pytest.mark.parametrize("pad_type", [PadType.NONE, PadType.ZERO])
def test_feedback_order_exceeds_block_size(pad_type):
    a = np.zeros(81)
    a[0] = 1.0
    a[80] = -0.5
    a[1] = 0.3
    x = np.random.randn(400, 2)

    filt = ARMAFilter([1.0], a, pad_type=pad_type)
    assert filt.warmup() == 240

    y = filt.filter(torch.from_numpy(x))
    y_scipy = signal.lfilter([1.0], a, x, axis=0)
    assert np.allclose(y.numpy(), y_scipy), np.max(np.abs(y.numpy() - y_scipy))


@pytest.mark.parametrize("block_size", [1, 3, 10])
def test_block_allpole_long_feedback(block_size):
    a = np.zeros(13)
    a[0] = 1.0
    a[[1, 7, 12]] = [0.2, -0.3, 0.4]
    x = np.random.randn(50, 3)
    y = block_allpole(torch.from_numpy(a), torch.from_numpy(x), block_size)
    y_scipy = signal.lfilter([1.0], a, x, axis=0)
    assert np.allclose(y.numpy(), y_scipy), np.max(np.abs(y.numpy() - y_scipy))


@pytest.mark.parametrize("N", [2, 3])
def test_frequency_domain_short_input(N):
    b = np.random.randn(5)
    x = torch.randn(N, 2).double()
    kwargs = dict(bn_start_index=2)

    y_freq = ARMAFilter(b, in_frequency_domain=True, **kwargs).filter(x)
    y_time = ARMAFilter(b, **kwargs).filter(x)
    assert y_freq.shape == x.shape
    assert torch.allclose(y_freq, y_time), torch.max(torch.abs(y_freq - y_time))
