"""
patcher.py — Batch patching session over one in-memory executable image.

Each definition is resolved immediately before it is applied, so a failure
part way through a batch leaves later patches untouched. Sites are dumped
with capstone before and after writing when verbose.
"""

from capstone import Cs, CS_ARCH_X86, CS_MODE_64

from .errors import (
    AlreadyApplied,
    MultiplePossibleLocations,
    PatchError,
    Unavailable,
)


_cs = Cs(CS_ARCH_X86, CS_MODE_64)

AVAILABLE = "available"
ALREADY_APPLIED = "already applied"
UNAVAILABLE = "unavailable"
AMBIGUOUS = "ambiguous"


def disasm_at(data, off, size):
    """Disassemble the instructions starting in data[off:off+size]."""
    return list(_cs.disasm(bytes(data[off:off + size]), off))


class SignaturePatcher:
    """Resolves and applies signature patches to a mutable image."""

    def __init__(self, data, verbose=False):
        self.data = data
        self.verbose = verbose

    def _log(self, msg):
        if self.verbose:
            print(msg)

    def _log_asm(self, off, size):
        # Pad so instructions straddling the site end are shown whole.
        insns = disasm_at(self.data, off, size + 8)
        for insn in insns:
            if insn.address >= off + size:
                break
            self._log(f"       0x{insn.address:08X}: "
                      f"{insn.mnemonic:8s} {insn.op_str}")

    def find_patch(self, definition):
        """Resolve `definition` against the image without writing anything."""
        return definition.resolve(self.data)

    def apply_patch(self, definition):
        self._log(f"\n[*] {definition.typ}")
        patch = self.find_patch(definition)
        for part in patch.parts:
            self._log(f"  [+] {part.description or 'site'} at "
                      f"0x{part.location:X}: {part.pre_patch.hex(' ')} -> "
                      f"{part.post_patch.hex(' ')}")
            self._log("    Before:")
            self._log_asm(part.location, len(part.pre_patch))

        patch.apply(self.data)

        for part in patch.parts:
            self._log(f"    After (0x{part.location:X}):")
            self._log_asm(part.location, len(part.post_patch))
        return patch

    def apply(self, definitions):
        """Apply `definitions` in order, skipping ones already applied.

        Any other PatchError aborts the batch. Returns the number of patches
        written.
        """
        n = 0
        for definition in definitions:
            try:
                self.apply_patch(definition)
            except AlreadyApplied:
                print(f"  [*] Skipping {definition.typ} (already applied)")
                continue
            except PatchError:
                print(f"  [-] FAILED: {definition.typ}")
                raise
            n += 1
        if n:
            self._log(f"\n  [{n} patches applied]")
        return n

    def status(self, definition):
        """Return AVAILABLE, ALREADY_APPLIED, UNAVAILABLE or AMBIGUOUS for `definition`."""
        try:
            self.find_patch(definition)
        except AlreadyApplied:
            return ALREADY_APPLIED
        except MultiplePossibleLocations:
            return AMBIGUOUS
        except Unavailable:
            return UNAVAILABLE
        return AVAILABLE

    def survey(self, definitions):
        """Report (definition, status) for each definition without patching."""
        return [(d, self.status(d)) for d in definitions]
