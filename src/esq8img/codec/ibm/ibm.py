# esq8img/codec/ibm/ibm.py
#
# IBM PC MFM: bitcell encoding, address marks, and sector extraction.
#
# This is free and unencumbered software released into the public domain.
# See the file COPYING for more details, or visit <http://unlicense.org>.

from __future__ import annotations
from typing import List, Tuple

import struct
from bitarray import bitarray
import crcmod.predefined

from esq8img.image.image import FloppyImage

mfm_iam_sync_bytes = b'\x52\x24' * 3
mfm_iam_sync = bitarray(endian='big')
mfm_iam_sync.frombytes(mfm_iam_sync_bytes)

mfm_sync_bytes = b'\x44\x89' * 3
mfm_sync = bitarray(endian='big')
mfm_sync.frombytes(mfm_sync_bytes)

# Fill in the clock bits of a stream of data-only bitcells. Cells that
# already carry a clock bit (sync words with a missing clock) are left as is.
def mfm_encode(dat):
    y = 0
    out = bytearray()
    for x in dat:
        y = (y<<8) | x
        if (x & 0xaa) == 0:
            y |= ~((y>>1)|(y<<1)) & 0xaaaa
        y &= 255
        out.append(y)
    return bytes(out)

encode_list: List[bytes] = []
for x in range(256):
    y = 0
    for i in range(8):
        y <<= 2
        y |= (x >> (7-i)) & 1
    encode_list.append(struct.pack('>H', y))

def encode(dat):
    return b''.join(encode_list[x] for x in dat)

decode_list = bytearray()
for x in range(0x5555+1):
    y = 0
    for i in range(16):
        if x&(1<<(i*2)):
            y |= 1<<i
    decode_list.append(y)

def decode(dat):
    out = bytearray()
    for x,y in zip(dat[::2], dat[1::2]):
        out.append(decode_list[((x<<8)|y)&0x5555])
    return bytes(out)

crc16 = crcmod.predefined.Crc('crc-ccitt-false')

def sec_sz(n):
    return 128 << n if n <= 7 else 128 << 8

def sec_n(size):
    """IBM size code N for a sector of @size bytes (128 << N)."""
    n = 0
    while sec_sz(n) < size:
        n += 1
    return n


class Mark:
    IAM  = 0xfc
    IDAM = 0xfe
    DAM  = 0xfb
    DDAM = 0xf8

class TrackArea:
    def __init__(self, start, end, crc=None):
        self.start = start
        self.end = end
        self.crc = crc

class IDAM(TrackArea):
    def __init__(self, start, end, crc, c, h, r, n):
        super().__init__(start, end, crc)
        self.c = c
        self.h = h
        self.r = r
        self.n = n
    def __str__(self):
        return ("IDAM:%6d-%6d c=%02x h=%02x r=%02x n=%02x CRC:%04x"
                % (self.start, self.end, self.c, self.h, self.r, self.n,
                   self.crc))

class DAM(TrackArea):
    def __init__(self, start, end, crc, mark, data=None):
        super().__init__(start, end, crc)
        self.mark = mark
        self.data = data
    def __str__(self):
        return "DAM: %6d-%6d mark=%02x" % (self.start, self.end, self.mark)

class Sector(TrackArea):
    def __init__(self, idam, dam):
        super().__init__(idam.start, dam.end, idam.crc | dam.crc)
        self.idam = idam
        self.dam = dam
    def __str__(self):
        s = "Sec: %6d-%6d CRC:%04x\n" % (self.start, self.end, self.crc)
        s += " " + str(self.idam) + "\n"
        s += " " + str(self.dam)
        return s

class IAM(TrackArea):
    def __str__(self):
        return "IAM: %6d-%6d" % (self.start, self.end)


def decode_areas(bits: bitarray) -> List[TrackArea]:
    """Locate all address-marked areas in one revolution of MFM bitcells.
    Offsets are in bitcells from the start of @bits. A CRC value of zero
    means the area's checksum verified."""

    areas: List[TrackArea] = []
    idam = None

    for offs in bits.search(mfm_iam_sync):
        if len(bits) < offs+4*16:
            continue
        mark = decode(bits[offs+3*16:offs+4*16].tobytes())[0]
        if mark == Mark.IAM:
            areas.append(IAM(offs, offs+4*16))

    for offs in bits.search(mfm_sync):

        if len(bits) < offs+4*16:
            continue
        mark = decode(bits[offs+3*16:offs+4*16].tobytes())[0]
        if mark == Mark.IDAM:
            s, e = offs, offs+10*16
            if len(bits) < e:
                continue
            b = decode(bits[s:e].tobytes())
            c,h,r,n = struct.unpack(">4x4B2x", b)
            crc = crc16.new(b).crcValue
            if idam is not None:
                areas.append(idam)
            idam = IDAM(s, e, crc, c=c, h=h, r=r, n=n)
        elif mark == Mark.DAM or mark == Mark.DDAM:
            if idam is None or offs - idam.end > 1000:
                areas.append(DAM(offs, offs+4*16, 0xffff, mark=mark))
            else:
                sz = sec_sz(idam.n)
                s, e = offs, offs+(4+sz+2)*16
                if len(bits) < e:
                    continue
                b = decode(bits[s:e].tobytes())
                crc = crc16.new(b).crcValue
                dam = DAM(s, e, crc, mark=mark, data=b[4:-2])
                areas.append(Sector(idam, dam))
            idam = None
        else:
            print("Unknown mark %02x" % mark)

    if idam is not None:
        areas.append(idam)

    areas.sort(key=lambda x:x.start)
    return areas


def extract_sectors(bits: bitarray) -> List[bytes]:
    """Sector payloads indexed by sector id. Sectors that were not found
    are empty. Only the ID field CRC is required to be good: data is
    returned as read."""
    sectors: List[bytes] = []
    for a in decode_areas(bits):
        if not isinstance(a, Sector) or a.idam.crc != 0:
            continue
        r = a.idam.r
        if r >= len(sectors):
            sectors += [bytes()] * (r + 1 - len(sectors))
        if len(sectors[r]) == 0:
            sectors[r] = a.dam.data
    return sectors


class IBMTrack:
    """The decoded view of one physical track: its index mark and sectors."""

    def __init__(self, cyl: int, head: int):
        self.cyl, self.head = cyl, head
        self.sectors: List[Sector] = []
        self.iams: List[IAM] = []

    @property
    def nsec(self) -> int:
        return len(self.sectors)

    def summary_string(self) -> str:
        nsec, nbad = len(self.sectors), self.nr_missing()
        return "IBM MFM (%d/%d sectors)" % (nsec - nbad, nsec)

    def has_sec(self, sec_id: int) -> bool:
        return any(s.idam.r == sec_id and s.crc == 0 for s in self.sectors)

    def nr_missing(self) -> int:
        return len(list(filter(lambda x: x.crc != 0, self.sectors)))

    def decode_bits(self, bits: bitarray) -> None:
        for a in decode_areas(bits):
            if isinstance(a, IAM):
                self.iams.append(a)
            elif isinstance(a, Sector):
                self.sectors.append(a)


# Bitcells of one physical track, read at a nominal cell period of @cell_ns.
# A track recorded at a density more than 10% away from the requested one
# reads as blank, as does a track that was never written.
def get_bitstream(image: FloppyImage, cyl: int, head: int,
                  cell_ns: float) -> bitarray:
    track = image.get_track(cyl, head)
    if track is None or len(track.bits) == 0:
        return bitarray(endian='big')
    if abs(track.cell_ns - cell_ns) > cell_ns * 0.10:
        return bitarray(endian='big')
    return track.bits.copy()


def get_geometry(image: FloppyImage, cell_ns: float) -> Tuple[int,int,int]:
    """Inspect a physical image: (cylinders, heads, sectors per track).
    Sectors are counted on cylinder 1 head 0, or cylinder 0 if that is
    the only cylinder."""
    cyls, heads = image.actual_geometry()
    if cyls == 0:
        return 0, 0, 0
    cyl = 1 if cyls > 1 else 0
    sectors = extract_sectors(get_bitstream(image, cyl, 0, cell_ns))
    secs = len(list(filter(lambda x: len(x) != 0, sectors)))
    return cyls, heads, secs


# Local variables:
# python-indent: 4
# End:
