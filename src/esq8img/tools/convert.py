# esq8img/tools/convert.py
#
# esq8img control script: Rewrite an image through its physical tracks.
#
# This is free and unencumbered software released into the public domain.
# See the file COPYING for more details, or visit <http://unlicense.org>.

description = "Convert an image via its physical tracks."

from esq8img.tools import util

def main(argv) -> None:

    parser = util.ArgumentParser(usage='%(prog)s [options] in_file out_file')
    parser.add_argument("--format", help="input image format")
    parser.add_argument("--out-format", help="output image format "
                        "(default: same as input)")
    parser.add_argument("-n", "--no-clobber", action="store_true",
                        help="do not overwrite an existing file")
    parser.add_argument("in_file", help="input filename")
    parser.add_argument("out_file", help="output filename")
    parser.description = description
    parser.prog += ' ' + argv[1]
    args = parser.parse_args(argv[2:])

    in_fmt = util.open_image_format(args.in_file, args.format)
    out_fmt = (in_fmt if args.out_format is None
               else util.get_format(args.out_format))

    print("Converting %s (%s) -> %s (%s)"
          % (args.in_file, in_fmt.name, args.out_file, out_fmt.name))
    image = in_fmt.load_file(args.in_file)
    print("Loaded %d tracks, %s" % (len(image.track_list()), image.variant))
    out_fmt.save_file(args.out_file, image, args.no_clobber)


# Local variables:
# python-indent: 4
# End:
