"""
patch.py — Patch definitions, resolution and transactional application.

A PatchDefinition is static catalog data. Resolving it against an image
yields a ResolvedPatch whose parts carry absolute file offsets; applying
that writes every part or none of them. Replacements never change length,
so applying one part never moves another part's offset.
"""

from dataclasses import dataclass, field, replace
from typing import Optional, Tuple

from .errors import MalformedPatch, PatchFileDoesNotMatchTarget
from .signature import SEARCH_WINDOW, find_edit, find_signature, instruction_eq


@dataclass(frozen=True)
class PatchPart:
    """One same-length rewrite, found relative to an anchor signature."""

    target: bytes
    pre_patch: bytes
    post_patch: bytes
    window: int = SEARCH_WINDOW
    description: str = ""
    location: Optional[int] = None

    def __post_init__(self):
        for name in ("target", "pre_patch", "post_patch"):
            object.__setattr__(self, name, bytes(getattr(self, name)))
        self.validate()

    def validate(self):
        if not self.target:
            raise MalformedPatch("patch part has an empty anchor")
        if not self.pre_patch:
            raise MalformedPatch("patch part has nothing to replace")
        if len(self.pre_patch) != len(self.post_patch):
            raise MalformedPatch(
                f"patch part resizes {len(self.pre_patch)} bytes "
                f"to {len(self.post_patch)}")
        if self.window < len(self.pre_patch):
            raise MalformedPatch(
                f"search window 0x{self.window:X} is shorter than the "
                f"{len(self.pre_patch)} byte patch site")

    def find(self, data):
        """Return a copy of this part located in `data`."""
        self.validate()
        anchor_off = find_signature(data, self.target)
        off = find_edit(data, anchor_off, self.pre_patch, self.post_patch,
                        self.window)
        return replace(self, location=off)


@dataclass(frozen=True)
class PatchDefinition:
    typ: object
    parts: Tuple[PatchPart, ...]
    description: str = ""

    def __post_init__(self):
        object.__setattr__(self, "parts", tuple(self.parts))
        if not self.parts:
            raise MalformedPatch(f"{self.typ} has no patch parts")

    def resolve(self, data):
        """Locate every part in `data`.

        Errors from any part propagate unchanged and no partial result is
        returned.
        """
        return ResolvedPatch(self.typ, tuple(p.find(data) for p in self.parts))


@dataclass(frozen=True)
class ResolvedPatch:
    """A patch located in one specific image. Not portable across images."""

    typ: object
    parts: Tuple[PatchPart, ...] = field(default_factory=tuple)

    def verify(self, data):
        """Raise PatchFileDoesNotMatchTarget unless every site still holds pre_patch."""
        for part in self.parts:
            end = part.location + len(part.pre_patch)
            if len(data) < end:
                raise PatchFileDoesNotMatchTarget()
            if not instruction_eq(data[part.location:end], part.pre_patch):
                raise PatchFileDoesNotMatchTarget()

    def apply(self, data):
        """Write every part into `data`, or nothing if any site has changed."""
        self.verify(data)
        for part in self.parts:
            off = part.location
            data[off:off + len(part.post_patch)] = part.post_patch
