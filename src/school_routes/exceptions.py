class SchoolRoutesError(Exception):
    """Base exception for route finding errors."""


class AddressNotFoundError(SchoolRoutesError):
    """Raised when a street address does not resolve to a known street and number."""


class JunctionNotFoundError(SchoolRoutesError):
    """Raised when an intersection id is not part of the junction graph."""


class EmptyGraphError(SchoolRoutesError):
    """Raised when the junction graph has no intersections to search."""


class NoRouteFoundError(SchoolRoutesError):
    """Raised when neither search direction reaches the destination."""


class UnknownSchoolError(SchoolRoutesError):
    """Raised when a requested school is not in the school directory."""
