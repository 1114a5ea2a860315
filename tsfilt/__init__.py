import logging
from pathlib import Path

from .padding import PadType, pad, trim
from .chain import FilterChain
from .lti import ARMAFilter, MovingAverage, Lag, Median, ReduceFilterOutput
from .config import create_filter, create_chain
from .base import DigitalFilter
from .errors import (
    FilterError,
    ZeroLengthInputError,
    InvalidPaddingError,
    InsufficientInputLengthError,
    UnknownPadTypeError,
    ResponseLengthTooShortError,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = Path(__file__).parent.joinpath("VERSION.txt").read_text().strip()

__all__ = [
    "PadType",
    "pad",
    "trim",
    "DigitalFilter",
    "FilterChain",
    "ARMAFilter",
    "MovingAverage",
    "Lag",
    "Median",
    "ReduceFilterOutput",
    "create_filter",
    "create_chain",
    "FilterError",
    "ZeroLengthInputError",
    "InvalidPaddingError",
    "InsufficientInputLengthError",
    "UnknownPadTypeError",
    "ResponseLengthTooShortError",
]
