"""
archgen error types.

Every failure raised by archgen derives from ArchgenError. Data problems
(bad records, colliding paths) also derive from ValueError so callers that
only care about "bad input" can catch that.
"""


class ArchgenError(Exception):
    """Base class for archgen errors."""


class MalformedInputError(ArchgenError, ValueError):
    """A project record or manifest does not have the expected shape."""


class AmbiguousPathError(ArchgenError, ValueError):
    """Two project paths collide in a way the tree cannot represent."""


class DiscoveryError(ArchgenError, RuntimeError):
    """The package manager could not list the workspace projects."""
