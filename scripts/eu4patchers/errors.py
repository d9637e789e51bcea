"""
errors.py — Error kinds raised while resolving and applying patches.
"""


class PatchError(Exception):
    """Base class for every patch failure."""

    message = "Patch failed"

    def __init__(self, message=None):
        super().__init__(message or self.message)


class Unavailable(PatchError):
    message = "Could not find a patch for this patch type"


class AlreadyApplied(PatchError):
    message = "This patch type is already applied to the executable"


class PatchFileDoesNotMatchTarget(PatchError):
    message = ("The file used to calculate the patch and apply the patch "
               "are not the same")


class MultiplePossibleLocations(PatchError):
    message = ("Could not find a patch, as there are multiple possible "
               "locations")


class MalformedPatch(PatchError):
    """Catalog entry is structurally invalid (raised at construction)."""

    message = "Patch definition is malformed"
