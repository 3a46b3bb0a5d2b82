# esq8img/track.py
#
# This is free and unencumbered software released into the public domain.
# See the file COPYING for more details, or visit <http://unlicense.org>.

from typing import Union
from bitarray import bitarray

# A pristine representation of a track, from a codec and/or a perfect image.
class MasterTrack:

    @property
    def bitrate(self) -> float:
        return len(self.bits) / self.time_per_rev

    @property
    def cell_ns(self) -> float:
        """Nominal bitcell period, in nanoseconds."""
        return self.time_per_rev * 1e9 / len(self.bits)

    # bits: Track bitcell data, starting at the index (bitarray or bytes)
    # time_per_rev: Time per revolution, in seconds (float)
    def __init__(
            self,
            bits: Union[bitarray, bytes],
            time_per_rev: float
    ) -> None:
        self.bits: bitarray
        if isinstance(bits, bytes):
            self.bits = bitarray(endian='big')
            self.bits.frombytes(bits)
        else:
            self.bits = bits
        self.time_per_rev = time_per_rev

    def __str__(self) -> str:
        s = "\nMaster Track:\n"
        s += (" %d bits, %.1f kbit/s"
              % (len(self.bits), self.bitrate/1000))
        s += ("\n %.1f ms / rev (%.1f rpm)"
              % (self.time_per_rev * 1000, 60 / self.time_per_rev))
        return s

    def summary_string(self) -> str:
        return ('Bitcells (%d bits, %.1f kbit/s, %.1f rpm)'
                % (len(self.bits), self.bitrate/1000, 60 / self.time_per_rev))

    def __eq__(self, x) -> bool:
        return (isinstance(x, MasterTrack)
                and self.time_per_rev == x.time_per_rev
                and self.bits == x.bits)


# Local variables:
# python-indent: 4
# End:
