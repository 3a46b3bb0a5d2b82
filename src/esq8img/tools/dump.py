# esq8img/tools/dump.py
#
# esq8img control script: Display the field layout of physical tracks.
#
# This is free and unencumbered software released into the public domain.
# See the file COPYING for more details, or visit <http://unlicense.org>.

description = "Display address marks and gaps of an image's tracks."

from typing import List, Optional

from esq8img.tools import util
from esq8img.codec.ibm import ibm

# Sync zeroes before each address mark.
gap_presync = 12

def analyse_ibm(t: ibm.IBMTrack) -> Optional[str]:
    if len(t.sectors) == 0:
        return None
    gaps2: List[int] = []
    gaps3: List[int] = []
    for i in range(len(t.sectors)):
        gap2 = t.sectors[i].dam.start - t.sectors[i].idam.end
        gap3 = t.sectors[i].start - t.sectors[i-1].end
        gap2 -= gap_presync*16
        gap3 -= gap_presync*16
        gaps2.append(gap2)
        gaps3.append(gap3)
    gap2 = sum(gaps2) / len(gaps2)
    s = f'  gap2: {round(gap2/16)}'
    if len(gaps3) > 1:
        gaps3 = gaps3[1:]
        gap3 = sum(gaps3) / len(gaps3)
        s += f'  gap3: {round(gap3/16)}'
    if len(t.iams) != 0:
        start = t.iams[0].start - gap_presync*16
        s += f'  gap4a: {round(start/16)}'
        start = t.sectors[0].start - gap_presync*16 - t.iams[0].end
        s += f'  gap1: {round(start/16)}'
    else:
        start = t.sectors[0].start - gap_presync*16
        s += f'  gap4a: {round(start/16)}'
    return s

def main(argv) -> None:

    epilog = util.tspec_desc
    parser = util.ArgumentParser(usage='%(prog)s [options] file',
                                 epilog=epilog)
    parser.add_argument("--format", help="image format")
    parser.add_argument("--tracks", type=util.TrackSet,
                        help="which tracks to display", metavar="TSPEC")
    parser.add_argument("file", help="image filename")
    parser.description = description
    parser.prog += ' ' + argv[1]
    args = parser.parse_args(argv[2:])

    fmt = util.open_image_format(args.file, args.format)
    image = fmt.load_file(args.file)

    for cyl, head in image.track_list():
        if args.tracks is not None and (cyl, head) not in args.tracks:
            continue
        track = image.get_track(cyl, head)
        assert track is not None # mypy
        t = ibm.IBMTrack(cyl, head)
        t.decode_bits(track.bits)
        print("T%d.%d: %s" % (cyl, head, t.summary_string()))
        gaps = analyse_ibm(t)
        if gaps is not None:
            print(gaps)
        for iam in t.iams:
            print(" " + str(iam))
        for sec in t.sectors:
            print(" " + str(sec).replace("\n", "\n "))


# Local variables:
# python-indent: 4
# End:
