"""
eu4.py — Patch catalog for the Europa Universalis IV Windows x64 executable.

Each patch type maps to one or more parts: an anchor signature (ANY marks
bytes that differ between builds) plus the check found just after it and
its same-length replacement.

Anchors end where their site begins so a patched image still matches them
and reports the patch as already applied. midgame-ironman is the exception:
its site starts inside the anchor (the bytes before it are too common to
anchor on alone), so once applied it reports unavailable instead.
"""

import enum

from keystone import Ks, KS_ARCH_X86, KS_MODE_64

from .patch import PatchDefinition, PatchPart
from .signature import ANY


_ks = Ks(KS_ARCH_X86, KS_MODE_64)


def _asm(s):
    enc, _ = _ks.asm(s)
    if not enc:
        raise RuntimeError(f"asm failed: {s}")
    return bytes(enc)


NOP = _asm("nop")
SETE_BL = _asm("sete bl")


class PatchTyp(enum.Enum):
    MODDED_IRONMAN = "modded-ironman"
    ENABLE_IRONMAN_LOADING = "enable-ironman-loading"
    MIDGAME_IRONMAN = "midgame-ironman"

    def __str__(self):
        return self.value


PATCHES = {
    PatchTyp.MODDED_IRONMAN: PatchDefinition(
        PatchTyp.MODDED_IRONMAN,
        [
            PatchPart(
                target=bytes([
                    0x01, 0x48, 0x8D, 0x97, 0x58, 0x02, 0x00, 0x00, 0x48, 0x83,
                    0x7A, 0x18, 0x10, 0x72, 0x03,
                ]),
                pre_patch=SETE_BL,
                # rex; inc bl
                post_patch=b"\x40\xFE\xC3",
                description="checksum compare -> inc bl",
            ),
        ],
        description="Enables Ironman with any checksum",
    ),
    PatchTyp.ENABLE_IRONMAN_LOADING: PatchDefinition(
        PatchTyp.ENABLE_IRONMAN_LOADING,
        [
            PatchPart(
                target=bytes([
                    0xD2, 0x48, 0x8B, 0x01, 0x4C, 0x8B, 0x80, 0x80, 0x00, 0x00,
                    0x00, 0x4C, 0x3B, 0xC7, 0x75, 0x14, 0x84, 0xD2,
                ]),
                pre_patch=b"\x74\x08",
                post_patch=NOP * 2,
                description="NOP je [ironman save filter]",
            ),
            PatchPart(
                target=bytes([
                    0xD7, 0x49, 0x8B, 0xCC, 0x41, 0xFF, 0x50, 0x28, 0x84, 0xC0,
                ]),
                pre_patch=b"\x0F\x84\x9C\x00\x00\x00",
                post_patch=NOP * 6,
                description="NOP je [ironman load guard]",
            ),
        ],
        description="Enables loading saves in ironman and makes ironman "
                    "saves available in that menu",
    ),
    PatchTyp.MIDGAME_IRONMAN: PatchDefinition(
        PatchTyp.MIDGAME_IRONMAN,
        [
            PatchPart(
                target=bytes([
                    0x48, 0x8B, 0x05, ANY, ANY, ANY, ANY, 0x80, 0xB8, ANY,
                    0x24, 0x00, 0x00, 0x00, 0x74, 0x0C,
                ]),
                pre_patch=bytes([0x80, 0xB8, ANY, 0x24, 0x00, 0x00, 0x00, 0x74]),
                # mov byte [rax+0x24F0], 0; first byte of jmp short
                post_patch=b"\xC6\x80\xF0\x24\x00\x00\x00\xEB",
                description="cmp/je -> mov/jmp",
            ),
        ],
        description="Turns normal saves into ironman saves by hovering over "
                    "the load button during gameplay. Converted saves list "
                    "no achievements; mainly useful for testing",
    ),
}


def find_patch(typ, data):
    """Resolve the catalog entry for `typ` against `data`."""
    return PATCHES[typ].resolve(data)
