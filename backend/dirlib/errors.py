"""Exception hierarchy for the directory core."""


class DirectoryError(Exception):
    """Base class for all directory errors."""


class FetchError(DirectoryError):
    """The employee records could not be loaded."""


class CriteriaError(DirectoryError, ValueError):
    """A sort-criteria mutation was rejected."""


class DuplicateFieldError(CriteriaError):
    pass


class UnknownFieldError(CriteriaError):
    pass


class OutOfRangeError(CriteriaError, IndexError):
    pass


class InvalidDirectionError(OutOfRangeError):
    pass


class InvalidPermutationError(CriteriaError):
    pass
