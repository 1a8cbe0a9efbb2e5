# traffic/exceptions.py


class TrafficTrackError(Exception):
    """Base class for every error raised by the traffic app."""


class GeometryError(TrafficTrackError):
    """A ring point could not be computed (non-finite destination)."""


class ProviderError(TrafficTrackError):
    """An external provider (matrix, land/water, geocoding) failed or answered with an error."""

    def __init__(self, provider: str, message: str, status: str | None = None):
        self.provider = provider
        self.status = status
        super().__init__(f"{provider}: {message}" + (f" (status={status})" if status else ""))


class MatrixError(TrafficTrackError):
    """A distance matrix payload is malformed."""


class InsufficientPointsError(TrafficTrackError):
    """Fewer than two usable points, a matrix would hold no trips."""

    def __init__(self, location: str, usable: int):
        self.location = location
        self.usable = usable
        super().__init__(f"{location}: {usable} usable point(s), at least 2 required")


class DuplicateLocationError(TrafficTrackError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Location already exists: {name}")
