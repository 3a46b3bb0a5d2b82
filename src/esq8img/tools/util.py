# esq8img/tools/util.py
#
# esq8img control script: Utility functions.
#
# This is free and unencumbered software released into the public domain.
# See the file COPYING for more details, or visit <http://unlicense.org>.

from __future__ import annotations
from typing import List, Optional, Tuple

import argparse, os, re
import importlib
from collections import OrderedDict
import itertools as it

from esq8img import error
from esq8img.image.image import ImageFormat


def columnify(strings, columns=80, sep=2):
    max_len = max(len(s) for s in strings) + sep
    per_row = max(1, columns // max_len)
    return '\n'.join(map(lambda row: (f'{{:{max_len}}}'*per_row).format(*row),
                         it.zip_longest(*[iter(strings)]*per_row,
                                        fillvalue='')))


class CmdlineHelpFormatter(argparse.ArgumentDefaultsHelpFormatter,
                           argparse.RawDescriptionHelpFormatter):
    def _get_help_string(self, action):
        help = action.help
        if '%no_default' in help:
            return help.replace('%no_default', '')
        if ('%(default)' in help
            or action.default is None
            or action.default is False
            or action.default is argparse.SUPPRESS):
            return help
        return help + ' (default: %(default)s)'


class ArgumentParser(argparse.ArgumentParser):
    def __init__(self, formatter_class=CmdlineHelpFormatter, *args, **kwargs):
        return super().__init__(formatter_class=formatter_class,
                                allow_abbrev=False,
                                *args, **kwargs)

tspec_desc = """\
TSPEC: Colon-separated list of:
  c=SET               :: Set of cylinders to access
  h=SET               :: Set of heads (sides) to access
  SET is a comma-separated list of integers and integer ranges
  e.g. 'c=0-7,9-12:h=0-1'
"""

def range_str(l):
    if len(l) == 0:
        return '<none>'
    p, str = None, ''
    for i in l:
        if p is not None and i == p[1]+1:
            p = p[0], i
            continue
        if p is not None:
            str += ('%d,' % p[0]) if p[0] == p[1] else ('%d-%d,' % p)
        p = (i,i)
    if p is not None:
        str += ('%d' % p[0]) if p[0] == p[1] else ('%d-%d' % p)
    return str

class TrackSet:

    def __init__(self, trackspec):
        self.cyls = list(range(84))
        self.heads = [0, 1]
        self.trackspec = ''
        self.update_from_trackspec(trackspec)

    def update_from_trackspec(self, trackspec):
        """Update a TrackSet based on a trackspec."""
        self.trackspec += trackspec
        for x in trackspec.split(':'):
            k,v = x.split('=')
            if k == 'c':
                cyls = set()
                for crange in v.split(','):
                    m = re.match(r'(\d+)(-(\d+)(/(\d+))?)?$', crange)
                    if m is None: raise ValueError()
                    if m.group(3) is None:
                        s,e,step = int(m.group(1)), int(m.group(1)), 1
                    else:
                        s,e,step = int(m.group(1)), int(m.group(3)), 1
                        if m.group(5) is not None:
                            step = int(m.group(5))
                    for c in range(s, e+1, step):
                        cyls.add(c)
                self.cyls = sorted(cyls)
            elif k == 'h':
                heads = [False]*2
                for hrange in v.split(','):
                    m = re.match(r'([01])(-([01]))?$', hrange)
                    if m is None: raise ValueError()
                    if m.group(3) is None:
                        s,e = int(m.group(1)), int(m.group(1))
                    else:
                        s,e = int(m.group(1)), int(m.group(3))
                    for h in range(s, e+1):
                        heads[h] = True
                self.heads = []
                for h in range(len(heads)):
                    if heads[h]: self.heads.append(h)
            else:
                raise ValueError()

    def __str__(self):
        return 'c=%s:h=%s' % (range_str(self.cyls), range_str(self.heads))

    def __iter__(self):
        """Iterate over a TrackSet in <cyl,head> order."""
        return iter([(c, h) for c in self.cyls for h in self.heads])

    def __contains__(self, key):
        c, h = key
        return c in self.cyls and h in self.heads


# Format name -> (class name, module name)
image_formats = OrderedDict(
    { 'esq8': ('ESQ8IMG', 'esq8') })

def get_format(name: str) -> ImageFormat:
    error.check(name in image_formats,
                "Unknown format '%s'\nKnown formats:\n%s"
                % (name, columnify(image_formats)))
    typename, modname = image_formats[name]
    mod = importlib.import_module('esq8img.image.' + modname)
    return mod.__dict__[typename]()

def identify_formats(name: str, size: int) -> List[Tuple[int,ImageFormat]]:
    """Formats claiming file @name of @size bytes, best match first."""
    _, ext = os.path.splitext(name)
    l = []
    for fmt_name in image_formats:
        fmt = get_format(fmt_name)
        if ext.lower().lstrip('.') not in fmt.extensions:
            continue
        score = fmt.identify(size)
        if score > 0:
            l.append((score, fmt))
    l.sort(key = lambda x: x[0], reverse = True)
    return l

def open_image_format(name: str, format: Optional[str] = None) -> ImageFormat:
    """The format of existing file @name: as named, else the best match."""
    if format is not None:
        return get_format(format)
    l = identify_formats(name, os.path.getsize(name))
    error.check(len(l) != 0, "%s: Unrecognised image file" % name)
    return l[0][1]


# Local variables:
# python-indent: 4
# End:
