"""Exception types raised by the compliance package."""


class ComplianceError(Exception):
    """Base class for all errors raised by this package."""

    pass


class ProblemFormatError(ComplianceError, ValueError):
    """Raised when a problem or schedule payload cannot be turned into domain objects."""

    pass


class ReportMismatchError(ComplianceError, ValueError):
    """Raised when two compliance reports do not describe the same constraint list."""

    pass


class ConfigError(ComplianceError, ValueError):
    """Raised when an evaluator configuration file is missing or invalid."""

    pass
