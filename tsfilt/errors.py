class FilterError(ValueError):
    """Base class of all errors raised while padding, filtering or evaluating a filter."""


class ZeroLengthInputError(FilterError):
    def __init__(self, rows: int, columns: int):
        self.rows = rows
        self.columns = columns
        super().__init__(
            f"Trying to pad a zero length array ({rows} x {columns})."
        )


class InvalidPaddingError(FilterError):
    def __init__(self, pad_type: str, rows: int, length: int):
        self.pad_type = pad_type
        self.rows = rows
        self.length = length
        super().__init__(
            f"Time series is too short (<{rows}> elements) to apply {pad_type} "
            f"padding for a filter with a warmup length of <{length}>."
        )


class InsufficientInputLengthError(FilterError):
    def __init__(self, rows: int, warmup: int):
        self.rows = rows
        self.warmup = warmup
        super().__init__(
            f"Time series is too short (<{rows}> elements) to apply a filter "
            f"with a warmup length of <{warmup}>."
        )


class UnknownPadTypeError(FilterError):
    def __init__(self, pad_type):
        self.pad_type = pad_type
        super().__init__(f"Unknown pad type: {pad_type!r}")


class ResponseLengthTooShortError(FilterError):
    def __init__(self, length: int, minimum: int):
        self.length = length
        self.minimum = minimum
        super().__init__(
            f"length must be at least {minimum} for this filter, got {length}."
        )
