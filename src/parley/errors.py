"""Parley exception hierarchy.

Shared across the config resolver, pathname compiler, negotiator, and
navigation builder so every module raises and catches the same types.
"""


class ParleyError(Exception):
    """Base for all parley-specific errors."""


class ConfigurationError(ParleyError):
    """Raised when routing configuration is invalid.

    Raised once by ``define_routing()`` at startup. A process must not
    serve requests with a configuration that failed validation.
    """


class MissingParameterError(ParleyError):
    """A pathname template was compiled without a required parameter.

    Signals a programming error at the call site, never a request-time
    condition.
    """

    def __init__(self, template: str, parameter: str) -> None:
        self.template = template
        self.parameter = parameter
        super().__init__(
            f"Missing parameter {parameter!r} for pathname {template!r}. "
            f"Pass it via params={{{parameter!r}: ...}}."
        )


class InvalidHrefError(ParleyError, ValueError):
    """An href passed at call time is a malformed pathname template."""

    def __init__(self, href: str, reason: str) -> None:
        self.href = href
        super().__init__(f"Invalid href {href!r}: {reason}")
