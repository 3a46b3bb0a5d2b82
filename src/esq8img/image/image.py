# esq8img/image/image.py
#
# This is free and unencumbered software released into the public domain.
# See the file COPYING for more details, or visit <http://unlicense.org>.

from __future__ import annotations
from typing import Optional, List, Dict, Tuple

import os
from enum import Enum

from esq8img import error
from esq8img.track import MasterTrack

class Variant(Enum):
    UNKNOWN, SSSD, SSDD, DSSD, DSDD, DSHD, DSED = range(7)
    def __str__(self):
        NAMES = [ 'Unknown', 'Single-Sided Single-Density',
                  'Single-Sided Double-Density',
                  'Double-Sided Single-Density',
                  'Double-Sided Double-Density',
                  'Double-Sided High-Density',
                  'Double-Sided Extended-Density' ]
        return f'{NAMES[self.value]}'


class FloppyImage:
    """A physical disk held in memory: one MasterTrack per (cyl, head)."""

    def __init__(self, cyls: int = 84, heads: int = 2) -> None:
        self.cyls, self.heads = cyls, heads
        self.variant = Variant.UNKNOWN
        self.to_track: Dict[Tuple[int,int],MasterTrack] = dict()

    def get_track(self, cyl: int, head: int) -> Optional[MasterTrack]:
        if (cyl,head) not in self.to_track:
            return None
        return self.to_track[cyl,head]

    def set_track(self, cyl: int, head: int, track: MasterTrack) -> None:
        error.check(0 <= cyl < self.cyls and 0 <= head < self.heads,
                    "T%d.%d: Out of range for a %d-cylinder %d-sided disk"
                    % (cyl, head, self.cyls, self.heads))
        self.to_track[cyl,head] = track

    def track_list(self) -> List[Tuple[int,int]]:
        return sorted(self.to_track)

    # Extent of the recorded surface: (cylinders, heads). Tracks without a
    # single flux transition do not count.
    def actual_geometry(self) -> Tuple[int,int]:
        cyls, heads = 0, 0
        for (cyl, head), track in self.to_track.items():
            if track.bits.any():
                cyls = max(cyls, cyl+1)
                heads = max(heads, head+1)
        return cyls, heads


class ImageFormat:
    """A sector image file format. Subclasses provide identification and
    conversion between the file's bytes and a FloppyImage."""

    name: str
    description: str
    extensions: List[str] = []
    supports_save = False

    def find_size(self, size: int) -> Tuple[int,int,int]:
        """(cylinders, heads, sectors) of a file of @size bytes, all zero
        if it is not in this format."""
        raise NotImplementedError

    def identify(self, size: int) -> int:
        """Confidence (0 = no match) that a file of @size bytes is in
        this format."""
        raise NotImplementedError

    def load(self, dat: bytes) -> FloppyImage:
        raise NotImplementedError

    def save(self, image: FloppyImage) -> bytes:
        raise NotImplementedError

    def load_file(self, name: str) -> FloppyImage:
        with open(name, "rb") as f:
            dat = f.read()
        error.check(self.identify(len(dat)) != 0,
                    "%s: Not a %s (%d bytes)"
                    % (name, self.description, len(dat)))
        return self.load(dat)

    def save_file(self, name: str, image: FloppyImage,
                  noclobber: bool = False) -> None:
        error.check(self.supports_save,
                    "%s: Cannot create %s image files" % (name, self.name))
        f = open(name, ('wb','xb')[noclobber])
        written = False
        try:
            f.write(self.save(image))
            written = True
        finally:
            # Always close the file.
            f.close()
            if not written:
                # An error occurred: We remove the target file.
                os.remove(name)


# Local variables:
# python-indent: 4
# End:
