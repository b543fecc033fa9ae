"""Exception hierarchy for labwatson.

Every error raised on purpose by the package derives from LabWatsonError so
callers (and the CLI) can catch them in one place.
"""


class LabWatsonError(Exception):
    """Base exception for labwatson errors."""

    pass


class InvalidPolicy(LabWatsonError, ValueError):
    """Raised when a naming policy is malformed (e.g. negative digits)."""

    pass


class InvalidTemplate(LabWatsonError, ValueError):
    """Raised when a dict_list template mixes sweep axes with ambiguous values."""

    pass


class UnsupportedContainer(LabWatsonError, TypeError):
    """Raised when a value has no ParameterSet adapter."""

    pass


class LoadFailure(LabWatsonError):
    """Raised when an artifact cannot be read."""

    pass


class UnsupportedFormat(LoadFailure):
    """Raised when an artifact has a suffix no reader or writer handles."""

    pass


class ExtractorFailure(LabWatsonError):
    """Raised (and recovered) when a derived-field extractor fails."""

    pass


class ProjectError(LabWatsonError):
    """Base exception for project setup and navigation errors."""

    pass


class ProjectNotFoundError(ProjectError):
    """Raised when no project root can be located."""

    pass


class ProjectNameMismatchError(ProjectError):
    """Raised when the activated project does not have the expected name."""

    pass


class ProjectExistsError(ProjectError):
    """Raised when initializing a project into a non-empty directory."""

    pass
