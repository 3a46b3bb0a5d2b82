# esq8img/error.py
#
# Error management and reporting.
#
# This is free and unencumbered software released into the public domain.
# See the file COPYING for more details, or visit <http://unlicense.org>.

class Fatal(Exception):
    pass

class SectorSizeError(Fatal):
    """A decoded sector does not have the size the format demands."""
    def __init__(self, fmt: str, cyl: int, head: int, sector: int,
                 size: int) -> None:
        super().__init__("%s: T%d.%d: sector %d invalid size: %d"
                         % (fmt, cyl, head, sector, size))
        self.cyl, self.head = cyl, head
        self.sector, self.size = sector, size

def check(pred, desc):
    if not pred:
        raise Fatal(desc)

# Local variables:
# python-indent: 4
# End:
