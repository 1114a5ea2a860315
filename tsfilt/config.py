import re
import logging
from typing import Any, Iterable, Mapping

from .chain import FilterChain
from .lti import ARMAFilter, MovingAverage, Lag, Median, ReduceFilterOutput

logger = logging.getLogger(__name__)

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def _keyword(name: str) -> str:
    # "bnStartIndex" -> "bn_start_index"
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def create_filter(config: Mapping[str, Any]):
    """Build a filter from a mapping with a ``type`` entry.

    The remaining entries are passed as keyword arguments to the filter's
    constructor; camelCase keys are converted to snake_case.

    Supported types are ``arma``, ``movingAverage``, ``lag``, ``movingMedian``
    and ``reduceFilterOutput`` (whose ``filters`` entry is a list of nested
    configurations).
    """
    config = dict(config)
    try:
        filter_type = config.pop("type")
    except KeyError:
        raise ValueError(f"Filter configuration without a type: {config}") from None
    kwargs = {_keyword(k): v for k, v in config.items()}

    logger.debug("creating %s filter with %s", filter_type, kwargs)
    match filter_type:
        case "arma":
            return ARMAFilter(**kwargs)
        case "movingAverage":
            return MovingAverage(**kwargs)
        case "lag":
            return Lag(**kwargs)
        case "movingMedian":
            return Median(**kwargs)
        case "reduceFilterOutput":
            return ReduceFilterOutput(create_chain(kwargs.pop("filters", ())), **kwargs)
        case _:
            raise ValueError(f"Unknown filter type: {filter_type}")


def create_chain(configs: Iterable[Mapping[str, Any]]) -> FilterChain:
    """Build a `FilterChain` from a list of filter configurations."""
    return FilterChain(create_filter(c) for c in configs)
