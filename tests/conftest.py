"""Shared fixtures: small synthetic executables holding known patch sites."""

from types import SimpleNamespace

import pytest


MODDED_IRONMAN_SITE = bytes([
    0x01, 0x48, 0x8D, 0x97, 0x58, 0x02, 0x00, 0x00, 0x48, 0x83,
    0x7A, 0x18, 0x10, 0x72, 0x03,
    0x0F, 0x94, 0xC3,                   # sete bl
    0x48, 0x8B, 0xCB,
])
IRONMAN_LOADING_SITE_A = bytes([
    0xD2, 0x48, 0x8B, 0x01, 0x4C, 0x8B, 0x80, 0x80, 0x00, 0x00,
    0x00, 0x4C, 0x3B, 0xC7, 0x75, 0x14, 0x84, 0xD2, 0x74, 0x08,
    0x48, 0x8B, 0xC8,
])
IRONMAN_LOADING_SITE_B = bytes([
    0xD7, 0x49, 0x8B, 0xCC, 0x41, 0xFF, 0x50, 0x28, 0x84, 0xC0,
    0x0F, 0x84, 0x9C, 0x00, 0x00, 0x00,
    0x48, 0x8B, 0xCE,
])
MIDGAME_IRONMAN_SITE = bytes([
    0x48, 0x8B, 0x05, 0x11, 0x22, 0x33, 0x44, 0x80, 0xB8, 0xF0,
    0x24, 0x00, 0x00, 0x00, 0x74, 0x0C,
    0xC3,
])

FILL = b"\xCC" * 0x40

MODDED_IRONMAN_OFF = 0x40
IRONMAN_LOADING_A_OFF = MODDED_IRONMAN_OFF + len(MODDED_IRONMAN_SITE) + 0x40
IRONMAN_LOADING_B_OFF = IRONMAN_LOADING_A_OFF + len(IRONMAN_LOADING_SITE_A) + 0x40
MIDGAME_IRONMAN_OFF = IRONMAN_LOADING_B_OFF + len(IRONMAN_LOADING_SITE_B) + 0x40


def build_eu4_image():
    return bytearray(
        FILL + MODDED_IRONMAN_SITE
        + FILL + IRONMAN_LOADING_SITE_A
        + FILL + IRONMAN_LOADING_SITE_B
        + FILL + MIDGAME_IRONMAN_SITE
        + FILL
    )


@pytest.fixture
def eu4_image():
    """A fake executable where every catalog patch is available."""
    return build_eu4_image()


@pytest.fixture
def eu4_exe(tmp_path):
    path = tmp_path / "eu4.exe"
    path.write_bytes(bytes(build_eu4_image()))
    return path


@pytest.fixture
def make_eu4_image():
    """Builder for fresh copies of the fake executable."""
    return build_eu4_image


@pytest.fixture
def eu4_sites():
    """Offsets of each anchor in the fake executable."""
    return SimpleNamespace(
        modded_ironman=MODDED_IRONMAN_OFF,
        ironman_loading_a=IRONMAN_LOADING_A_OFF,
        ironman_loading_b=IRONMAN_LOADING_B_OFF,
        midgame_ironman=MIDGAME_IRONMAN_OFF,
    )
