# esq8img/image/esq8.py
#
# Ensoniq Mirage/SQ-80 floppy disk image.
#
# Disk is PC MFM, 40 cylinders, double sided, 6 sectors per track.
# Sectors 0-4 are 1024 bytes, sector 5 is 512 bytes. The image file holds
# the sectors in order, cylinder-major: C0H0 C0H1 C1H0 ...
#
# This is free and unencumbered software released into the public domain.
# See the file COPYING for more details, or visit <http://unlicense.org>.

from typing import NamedTuple

from esq8img import error
from esq8img.codec.desc import (MFM, Raw, IDField, Field, CRCStart, CRCEnd,
                                CRC, SectorData, SectorLoop, SectorDesc,
                                generate_track)
from esq8img.codec.ibm import ibm
from esq8img.image.image import ImageFormat, FloppyImage, Variant

class Geometry(NamedTuple):
    cyls: int
    heads: int
    secs: int

class SectorLayout(NamedTuple):
    r: int
    offset: int
    size: int

SECTORS = tuple(SectorLayout(r, r*1024, 1024 if r < 5 else 512)
                for r in range(6))

CYLS = 40
TRACK_SIZE = 5*1024 + 512
TRACK_CELLS = 109376
# Nominal DD bitcell period for reading tracks back.
CELL_NS = 2000

ESQ_6_DESC = (
    MFM(0x4e, 80),
    MFM(0x00, 12),
    Raw(0x5224, 3),
    MFM(0xfc, 1),
    MFM(0x4e, 50),
    MFM(0x00, 12),
    SectorLoop((
        CRCStart(1),
        Raw(0x4489, 3),
        MFM(0xfe, 1),
        IDField(Field.TRACK),
        IDField(Field.HEAD),
        IDField(Field.SECTOR),
        IDField(Field.SIZE),
        CRCEnd(1),
        CRC(1),
        MFM(0x4e, 22),
        MFM(0x00, 12),
        CRCStart(2),
        Raw(0x4489, 3),
        MFM(0xfb, 1),
        SectorData(),
        CRCEnd(2),
        CRC(2),
        MFM(0x4e, 84),
        MFM(0x00, 12),
    )),
    MFM(0x4e, 170),
)


def find_size(size: int) -> Geometry:
    """Geometry of an image file of @size bytes, or all zeroes if the
    size does not match. Only the full double-sided image (80 track-sides)
    is a valid file: a single-sided image would be indistinguishable from
    one truncated at the half-way point."""
    if size == CYLS * 2 * TRACK_SIZE:
        return Geometry(CYLS, 2, len(SECTORS))
    return Geometry(0, 0, 0)


class ESQ8IMG(ImageFormat):

    name = 'esq8'
    description = 'Ensoniq Mirage/SQ-80 floppy disk image'
    extensions = ['img']
    supports_save = True

    def find_size(self, size: int) -> Geometry:
        return find_size(size)

    def identify(self, size: int) -> int:
        if find_size(size).cyls:
            return 50
        return 0

    def load(self, dat: bytes) -> FloppyImage:
        geom = find_size(len(dat))
        image = FloppyImage(cyls = CYLS, heads = 2)
        buf = memoryview(dat)
        for cyl in range(geom.cyls):
            for head in range(geom.heads):
                pos = (cyl*geom.heads + head) * TRACK_SIZE
                tdat = buf[pos:pos+TRACK_SIZE]
                error.check(len(tdat) == TRACK_SIZE,
                            "%s: T%d.%d: Short read at offset %d"
                            % (self.name, cyl, head, pos))
                sectors = [SectorDesc(s.r, bytes(tdat[s.offset:
                                                      s.offset+s.size]))
                           for s in SECTORS]
                image.set_track(cyl, head,
                                generate_track(ESQ_6_DESC, cyl, head,
                                               sectors, TRACK_CELLS))
        image.variant = Variant.DSDD
        return image

    def save(self, image: FloppyImage) -> bytes:
        cyls, heads, secs = ibm.get_geometry(image, CELL_NS)

        # The format's geometry is authoritative over a partially formatted
        # disk. No heads at all happens for a fully unformatted disk.
        if cyls != CYLS:
            cyls = CYLS
        if heads == 0:
            heads = 1
        if secs != len(SECTORS):
            secs = len(SECTORS)

        tdat = bytearray()
        for cyl in range(cyls):
            for head in range(heads):
                bits = ibm.get_bitstream(image, cyl, head, CELL_NS)
                sectors = ibm.extract_sectors(bits)
                for s in SECTORS[:secs]:
                    dat = sectors[s.r] if s.r < len(sectors) else bytes()
                    if len(dat) != s.size:
                        raise error.SectorSizeError(self.name, cyl, head,
                                                    s.r, len(dat))
                    tdat += dat
        return bytes(tdat)


# Local variables:
# python-indent: 4
# End:
