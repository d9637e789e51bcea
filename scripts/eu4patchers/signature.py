"""
signature.py — Wildcard byte signature matching.

Matching is plain byte comparison: no disassembly, no instruction decoding.
A pattern byte equal to ANY matches whatever byte sits at that position, so
signatures can skip over displacements and immediates that move between
game builds.

Two scans are layered:
  - find_signature: the whole image, the anchor must match exactly once
  - find_edit:      a short window after the anchor, first match wins
"""

from .errors import AlreadyApplied, MultiplePossibleLocations, Unavailable


ANY = ord("*")

# Bytes after the anchor searched for the patch site. Tied to the distance
# between anchor and target in known builds; override per part if needed.
SEARCH_WINDOW = 100


def instruction_eq(location, pattern):
    """True if `location` equals `pattern`, ANY bytes in `pattern` match anything."""
    if len(location) != len(pattern):
        return False
    for l, p in zip(location, pattern):
        if p != ANY and p != l:
            return False
    return True


def _literal_run(pattern):
    """Longest ANY-free run in `pattern` as (start, bytes)."""
    best_start, best_len = 0, 0
    start = 0
    for i, b in enumerate(bytes(pattern) + bytes([ANY])):
        if b == ANY:
            if i - start > best_len:
                best_start, best_len = start, i - start
            start = i + 1
    return best_start, bytes(pattern[best_start:best_start + best_len])


def _iter_signature(data, anchor):
    """Yield every offset of `anchor` in `data`, ascending.

    Candidates come from bytes.find on the anchor's longest literal run and
    are then checked against the whole anchor.
    """
    size = len(anchor)
    last = len(data) - size
    if not size or last < 0:
        return
    rel, needle = _literal_run(anchor)
    if not needle:
        for off in range(last + 1):
            if instruction_eq(data[off:off + size], anchor):
                yield off
        return

    pos = data.find(needle, rel)
    while 0 <= pos:
        off = pos - rel
        if off > last:
            break
        if instruction_eq(data[off:off + size], anchor):
            yield off
        pos = data.find(needle, pos + 1)


def find_signature_offsets(data, anchor):
    """Return every offset in `data` where `anchor` matches."""
    return list(_iter_signature(data, anchor))


def find_signature(data, anchor):
    """Return the unique offset of `anchor` in `data`.

    Raises Unavailable if it never matches and MultiplePossibleLocations if
    it matches more than once. An ambiguous anchor is never narrowed down by
    picking one of the hits.
    """
    found = None
    for off in _iter_signature(data, anchor):
        if found is not None:
            raise MultiplePossibleLocations()
        found = off
    if found is None:
        raise Unavailable()
    return found


def _first_offset(start, end, pred):
    """First offset in [start, end) for which pred(off) is true, or None."""
    for off in range(start, end):
        if pred(off):
            return off
    return None


def find_edit(data, anchor_off, pre_patch, post_patch, window=SEARCH_WINDOW):
    """Locate the patch site for one part near an anchor.

    Scans `data[anchor_off:anchor_off + window]` in ascending order. At each
    offset the bytes are first compared literally with `post_patch`, which
    means the part was already patched, then with `pre_patch` using
    wildcards. Returns the absolute offset of the first `pre_patch` hit.
    """
    size = len(pre_patch)
    post_patch = bytes(post_patch)
    region_end = min(len(data), anchor_off + window)

    def is_site(off):
        chunk = bytes(data[off:off + size])
        if chunk == post_patch:
            raise AlreadyApplied()
        return instruction_eq(chunk, pre_patch)

    off = _first_offset(anchor_off, region_end - size + 1, is_site)
    if off is None:
        raise Unavailable()
    return off
