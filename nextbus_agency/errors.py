"""
Failure conditions raised by the NextBus client.

Each error has a short ``name`` identifying the condition, so callers that
only care about the kind of failure can branch on it without importing every
class.
"""


class NextBusError(Exception):
    name = "error"

    def __init__(self, message, detail=None):
        super().__init__(message)
        self.message = message
        self.detail = detail


class NoCacheError(NextBusError):
    """Raised when an operation needs the agency cache before it was built."""
    name = "nocache"

    def __init__(self, message="no agency cache"):
        super().__init__(message)


class UnknownRouteError(NextBusError, LookupError):
    name = "noroute"

    def __init__(self, route):
        super().__init__(f"route not found: {route}")
        self.route = route


class UnknownStopError(NextBusError, LookupError):
    name = "nostop"

    def __init__(self, stop):
        super().__init__(f"stop not found: {stop}")
        self.stop = stop


class EmptyQueryError(NextBusError):
    """Raised when a route/stop pair request resolves to nothing to query."""
    name = "emptyquery"

    def __init__(self, message="No data to query for given route stops"):
        super().__init__(message)


class ParseFailure(NextBusError):
    name = "ParseError"

    def __init__(self, message, detail=None, data=None):
        super().__init__(message, detail)
        self.data = data


class TransportFailure(NextBusError):
    name = "TransportError"

    def __init__(self, message, status=None):
        super().__init__(message)
        self.status = status


class TypeMismatch(NextBusError, TypeError):
    name = "TypeError"
