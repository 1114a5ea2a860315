from .arma import ARMAFilter, banded, block_fir, block_allpole
from .filters import MovingAverage, Lag, Median, ReduceFilterOutput

__all__ = [
    "ARMAFilter",
    "MovingAverage",
    "Lag",
    "Median",
    "ReduceFilterOutput",
    "banded",
    "block_fir",
    "block_allpole",
]
