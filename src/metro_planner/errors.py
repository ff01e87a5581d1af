"""Exceptions raised by the metro route planner."""


class MetroPlannerError(Exception):
    """Base class for planner errors."""


class MalformedDataset(MetroPlannerError):
    """The dataset is missing required fields and cannot be turned into a graph."""


class InvalidStationCode(MetroPlannerError):
    """A station code is not present in the station registry."""

    def __init__(self, code: str):
        super().__init__(f"Unknown station code: {code!r}")
        self.code = code


class DatasetUnavailable(MetroPlannerError):
    """The dataset could not be fetched or decoded."""
