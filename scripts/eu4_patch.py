#!/usr/bin/env python3
"""
eu4_patch.py — Patch the Europa Universalis IV executable, mainly to enable
features restricted by ironman.

Usage:
    python3 eu4_patch.py -i eu4.exe --list-available
    python3 eu4_patch.py -i eu4.exe -p modded-ironman,enable-ironman-loading
    python3 eu4_patch.py -i eu4.exe -p midgame-ironman -o eu4_patched.exe

Patch sites are found by signature, so the same catalog works across game
builds as long as each anchor stays unique. The executable is only written
once every requested patch has been applied or skipped as already applied.
"""

import argparse
import sys

from eu4patchers.errors import PatchError
from eu4patchers.eu4 import PATCHES, PatchTyp
from eu4patchers.patcher import SignaturePatcher


def patch_types(value):
    types = []
    for name in value.split(","):
        name = name.strip()
        if not name:
            continue
        try:
            types.append(PatchTyp(name))
        except ValueError:
            choices = ", ".join(t.value for t in PatchTyp)
            raise argparse.ArgumentTypeError(
                f"invalid patch {name!r} (choose from {choices})")
    return types


def build_parser():
    epilog = "\n".join(f"  {t.value:24s} {PATCHES[t].description}"
                       for t in PatchTyp)
    parser = argparse.ArgumentParser(
        description="A patcher for Europa Universalis 4. Mainly to enable "
                    "features restricted by ironman.",
        epilog="patches:\n" + epilog,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-i", "--input", required=True,
                        help="the executable to patch")
    parser.add_argument("-l", "--list-available", action="store_true",
                        help="report which patches apply to the executable")
    parser.add_argument("-p", "--patch", type=patch_types, action="append",
                        default=[],
                        help="comma separated patches to apply, in order")
    parser.add_argument("-o", "--output-file",
                        help="where to write the patched executable, "
                             "including its file name (default: --input)")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="print each patch site before and after")
    return parser


def list_available(data):
    p = SignaturePatcher(data)
    for definition, status in p.survey(PATCHES[t] for t in PatchTyp):
        print(f"{definition.typ} is {status}")


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    patches = [t for group in args.patch for t in group]

    if args.list_available and patches:
        parser.error("--list-available cannot be used with --patch")
    if args.output_file and not patches:
        parser.error("--output-file requires --patch")
    if not args.list_available and not patches:
        parser.error("nothing to do, pass --patch or --list-available")

    try:
        with open(args.input, "rb") as f:
            data = bytearray(f.read())
    except OSError as e:
        print(f"[-] Cannot read {args.input}: {e.strerror}")
        return 1

    if args.list_available:
        list_available(data)
        return 0

    print(f"[*] {args.input}: {len(data)} bytes")
    p = SignaturePatcher(data, verbose=args.verbose)
    try:
        n = p.apply(PATCHES[t] for t in patches)
    except PatchError as e:
        print(f"[-] {e}")
        return 1

    output = args.output_file or args.input
    try:
        with open(output, "wb") as f:
            f.write(data)
    except OSError as e:
        print(f"[-] Cannot write {output}: {e.strerror}")
        return 1
    print(f"[+] {n} patches applied, saved to {output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
