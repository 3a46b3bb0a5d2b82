# esq8img/tools/info.py
#
# esq8img control script: Identify image files.
#
# This is free and unencumbered software released into the public domain.
# See the file COPYING for more details, or visit <http://unlicense.org>.

description = "Identify image files and display their geometry."

import os

from esq8img.tools import util

def print_info_line(name: str, value: str, tab=0) -> None:
    print(''.ljust(tab) + (name + ':').ljust(12-tab) + value)

def main(argv) -> int:

    parser = util.ArgumentParser(usage='%(prog)s [options] file...')
    parser.add_argument("files", nargs='+', metavar="FILE",
                        help="image filename")
    parser.description = description
    parser.prog += ' ' + argv[1]
    args = parser.parse_args(argv[2:])

    res = 0
    for name in args.files:
        size = os.path.getsize(name)
        print(name + ':')
        l = util.identify_formats(name, size)
        if len(l) == 0:
            print_info_line('Format', 'Unrecognised (%d bytes)' % size, 2)
            res = 1
            continue
        for score, fmt in l:
            cyls, heads, secs = fmt.find_size(size)
            print_info_line('Format', '%s (%s)'
                            % (fmt.name, fmt.description), 2)
            print_info_line('Score', '%d' % score, 2)
            print_info_line('Geometry', '%d cylinders, %d heads, %d sectors'
                            % (cyls, heads, secs), 2)
    return res


# Local variables:
# python-indent: 4
# End:
