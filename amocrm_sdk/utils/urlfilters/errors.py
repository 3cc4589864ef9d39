"""
Errors raised while translating web UI list URLs into API filters
"""


class ParseError(ValueError):
    """Base error for URL filter parsing"""
    pass


class InvalidURLError(ParseError):
    """Input is not a parseable URL"""

    def __init__(self, raw_url: str, reason: str):
        self.raw_url = raw_url
        self.reason = reason
        super().__init__(f"Invalid URL {raw_url!r}: {reason}")


class UnknownEntityError(ParseError):
    """URL path has no /<entity>/list/ segment"""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Cannot determine entity type from URL path: {path!r}")


class WrongEntityError(ParseError):
    """URL path does not point at the expected entity list"""

    def __init__(self, expected_entity: str, path: str):
        self.expected_entity = expected_entity
        self.path = path
        super().__init__(
            f"URL path {path!r} is not a {expected_entity} list URL"
        )


class InternalMismatchError(ParseError):
    """Generic parser resolved a different entity than the adapter's path check"""

    def __init__(self, expected_entity: str, actual_entity: str):
        self.expected_entity = expected_entity
        self.actual_entity = actual_entity
        super().__init__(
            f"Internal error: entity type resolved as {actual_entity!r}, "
            f"expected {expected_entity!r}"
        )


class InvalidPaginationError(ParseError):
    """page or limit is not an integer"""

    def __init__(self, field: str, value: str):
        self.field = field
        self.value = value
        super().__init__(f"Cannot convert {field}={value!r} to integer")
