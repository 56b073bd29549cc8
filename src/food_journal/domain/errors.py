"""Error types raised by journal services."""


class AnalysisInputError(ValueError):
    """Rejected input, raised before any external call is made."""


class AnalysisError(RuntimeError):
    """The analysis collaborator failed or returned unusable data."""


class AnalysisBusyError(RuntimeError):
    """Another analysis is already in flight."""


class ProfileMissingError(LookupError):
    """No profile has been created yet."""
