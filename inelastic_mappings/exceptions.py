"""
Errors raised by mapping operations.

Each error carries the process exit code the ``mapping`` command reports
when the error aborts it.
"""

EX_USAGE = 64
EX_UNAVAILABLE = 69
EX_NOPERM = 77


class MappingError(Exception):
    exit_code = 1


class ConflictError(MappingError):
    """
    The state of an index conflicts with the requested operation.
    """


class IndexExists(ConflictError):
    def __init__(self, name):
        super().__init__("Conflicting index: {}".format(name))
        self.index = name


class MissingIndex(ConflictError):
    def __init__(self, name):
        super().__init__("Missing index: {}".format(name))
        self.index = name


class ArgumentError(MappingError):
    exit_code = EX_USAGE


class OperationNotPermitted(MappingError):
    exit_code = EX_NOPERM

    def __init__(self, environment):
        super().__init__(
            "Operation not permitted in environment: {}".format(environment)
        )
        self.environment = environment


class OperationCancelled(MappingError):
    pass


class ClusterUnavailable(MappingError):
    exit_code = EX_UNAVAILABLE


class VerificationFailure(MappingError):
    def __init__(self, message, result):
        super().__init__(message)
        self.result = result


class SliceFailure(MappingError):
    """
    A single monthly slice of a copy failed. Recorded, never fatal.
    """
    def __init__(self, month_slice, cause):
        super().__init__(
            "Copy of slice {} failed: {!s}".format(month_slice, cause)
        )
        self.slice = month_slice
        self.cause = cause
