# fitlowprice/errors.py

"""Error taxonomy surfaced by the aggregation and pricing layers."""


class FitLowPriceError(Exception):
    """Base class for all fitlowprice errors."""


class InvalidInput(FitLowPriceError):
    """A caller-supplied value was rejected before any I/O took place."""


class SourceUnavailable(FitLowPriceError):
    """A marketplace could not be reached or answered unusably.

    Raised inside an adapter's fetch step and caught at the adapter
    boundary; it never propagates to the aggregator's caller.
    """

    def __init__(self, source_id: str, reason: str) -> None:
        super().__init__(f"[{source_id}] {reason}")
        self.source_id = source_id
        self.reason = reason


class ComputationFailed(FitLowPriceError):
    """The price engine hit an unexpected internal fault."""
