# esq8img/codec/desc.py
#
# Declarative track layouts, and their rendering to MFM bitcells.
#
# This is free and unencumbered software released into the public domain.
# See the file COPYING for more details, or visit <http://unlicense.org>.

from __future__ import annotations
from typing import Dict, List, NamedTuple, Optional, Sequence, Tuple, Union

import struct
from enum import Enum

from esq8img import error
from esq8img.codec.ibm import ibm
from esq8img.track import MasterTrack

# Rotation-normalised tracks: one revolution at 300rpm.
time_per_rev = 0.2

class Field(Enum):
    TRACK, HEAD, SECTOR, SIZE = range(4)

## Layout steps. A layout is a tuple of these, interpreted in order.

class MFM(NamedTuple):
    """@count copies of data byte @byte, MFM encoded."""
    byte: int
    count: int = 1

class Raw(NamedTuple):
    """@count copies of 16-bit cell pattern @word, written as is."""
    word: int
    count: int = 1

class IDField(NamedTuple):
    """One byte of the current sector's ID: track, head, sector or size."""
    field: Field

class CRCStart(NamedTuple):
    slot: int

class CRCEnd(NamedTuple):
    slot: int

class CRC(NamedTuple):
    """The two CRC bytes of the area between CRCStart and CRCEnd."""
    slot: int

class SectorData(NamedTuple):
    pass

class SectorLoop(NamedTuple):
    """Repeat @body once per sector."""
    body: Tuple[Step, ...]

Step = Union[MFM, Raw, IDField, CRCStart, CRCEnd, CRC,
             SectorData, SectorLoop]

class SectorDesc(NamedTuple):
    r: int
    data: bytes


class TrackBuilder:
    """Accumulates a track as data-only MFM cells (clock bits filled in at
    the end), alongside the decoded byte stream used for CRC areas."""

    def __init__(self, cyl: int, head: int) -> None:
        self.cyl, self.head = cyl, head
        self.cells = bytearray()
        self.dat = bytearray()
        self.crc_areas: Dict[int,List[Optional[int]]] = dict()

    def mfm(self, dat: bytes) -> None:
        self.cells += ibm.encode(dat)
        self.dat += dat

    def raw(self, words: bytes) -> None:
        self.cells += words
        self.dat += ibm.decode(words)

    def run(self, desc: Sequence[Step],
            sec: Optional[SectorDesc] = None,
            sectors: Sequence[SectorDesc] = ()) -> None:
        for step in desc:
            if isinstance(step, MFM):
                self.mfm(bytes([step.byte] * step.count))
            elif isinstance(step, Raw):
                self.raw(struct.pack('>H', step.word) * step.count)
            elif isinstance(step, SectorLoop):
                error.check(sec is None, 'nested sector loop')
                for s in sectors:
                    self.run(step.body, s)
            elif isinstance(step, CRCStart):
                self.crc_areas[step.slot] = [len(self.dat), None]
            elif isinstance(step, CRCEnd):
                error.check(step.slot in self.crc_areas,
                            'CRC %d ended but never started' % step.slot)
                self.crc_areas[step.slot][1] = len(self.dat)
            elif isinstance(step, CRC):
                s, e = self.crc_areas.get(step.slot, [None, None])
                error.check(s is not None and e is not None,
                            'CRC %d emitted before its area ends' % step.slot)
                crc = ibm.crc16.new(bytes(self.dat[s:e])).crcValue
                self.mfm(struct.pack('>H', crc))
            elif isinstance(step, (SectorData, IDField)):
                error.check(sec is not None,
                            '%s outside of a sector loop'
                            % type(step).__name__)
                assert sec is not None # mypy
                if isinstance(step, SectorData):
                    self.mfm(sec.data)
                else:
                    self.mfm(bytes([self.id_byte(step.field, sec)]))
            else:
                raise error.Fatal('unrecognised layout step %r' % (step,))

    def id_byte(self, field: Field, sec: SectorDesc) -> int:
        if field is Field.TRACK:
            return self.cyl
        if field is Field.HEAD:
            return self.head
        if field is Field.SECTOR:
            return sec.r
        return ibm.sec_n(len(sec.data))


def generate_track(desc: Sequence[Step], cyl: int, head: int,
                   sectors: Sequence[SectorDesc],
                   cell_count: int) -> MasterTrack:
    """Render @desc for one track into @cell_count MFM bitcells, padding
    the tail with gap bytes. The layout's first step supplies the gap byte
    for padding."""

    t = TrackBuilder(cyl, head)
    t.run(desc, sectors=sectors)

    tlen = cell_count // 16
    if len(t.dat) > tlen:
        print('T%d.%d: WARNING: Track is %.2f%% too long'
              % (cyl, head, 100.0*len(t.dat)/tlen))
    elif len(t.dat) < tlen:
        gapbyte = desc[0].byte if isinstance(desc[0], MFM) else 0x4e
        t.mfm(bytes([gapbyte] * (tlen - len(t.dat))))

    return MasterTrack(bits = ibm.mfm_encode(t.cells),
                       time_per_rev = time_per_rev)


# Local variables:
# python-indent: 4
# End:
