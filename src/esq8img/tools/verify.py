# esq8img/tools/verify.py
#
# esq8img control script: Round-trip an image through physical tracks.
#
# This is free and unencumbered software released into the public domain.
# See the file COPYING for more details, or visit <http://unlicense.org>.

description = "Check that an image survives conversion to physical tracks."

from esq8img.tools import util
from esq8img.codec.ibm import ibm

def main(argv) -> int:

    parser = util.ArgumentParser(usage='%(prog)s [options] file')
    parser.add_argument("--format", help="image format")
    parser.add_argument("file", help="image filename")
    parser.description = description
    parser.prog += ' ' + argv[1]
    args = parser.parse_args(argv[2:])

    fmt = util.open_image_format(args.file, args.format)
    print("Format " + fmt.name)

    with open(args.file, "rb") as f:
        dat = f.read()
    image = fmt.load(dat)
    print("Variant: %s" % image.variant)

    for cyl, head in image.track_list():
        track = image.get_track(cyl, head)
        assert track is not None # mypy
        t = ibm.IBMTrack(cyl, head)
        t.decode_bits(track.bits)
        print("T%d.%d: %s from %s" % (cyl, head, t.summary_string(),
                                      track.summary_string()))

    out = fmt.save(image)
    if out == dat:
        print("Verified OK: %d bytes" % len(out))
        return 0

    if len(out) != len(dat):
        print("MISMATCH: %d bytes in, %d bytes out" % (len(dat), len(out)))
    else:
        pos = next(i for i, (x, y) in enumerate(zip(dat, out)) if x != y)
        print("MISMATCH: first difference at offset %d" % pos)
    return 1


# Local variables:
# python-indent: 4
# End:
