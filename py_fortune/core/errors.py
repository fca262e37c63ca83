"""Exception types raised by the diagram generator."""


class VoronoiError(Exception):
    """Base class for all generator errors."""


class InvalidSitesError(VoronoiError, ValueError):
    """The caller supplied unusable input (no sites, bad coordinates, bad rectangle)."""


class InternalInvariantError(VoronoiError, RuntimeError):
    """
    A state the sweep or the assembler should never reach.

    Signals either an implementation bug or a numerical tolerance that is
    not tuned for the coordinate range in use. The current computation is
    aborted and no partial diagram is returned.
    """
