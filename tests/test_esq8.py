import pytest

from esq8img import error
from esq8img.codec.ibm import ibm
from esq8img.image import esq8
from esq8img.image.esq8 import ESQ8IMG, Geometry, find_size
from esq8img.image.image import FloppyImage, Variant

IMAGE_SIZE = esq8.CYLS * 2 * esq8.TRACK_SIZE


def track_chunk(dat, cyl, head):
    pos = (cyl*2 + head) * esq8.TRACK_SIZE
    return dat[pos:pos+esq8.TRACK_SIZE]


def split_sectors(chunk):
    return [chunk[s.offset:s.offset+s.size] for s in esq8.SECTORS]


def resize_sector(monkeypatch, cyl, head, sector, size):
    """Make one sector of one track decode to @size bytes."""
    get_bitstream = ibm.get_bitstream
    extract_sectors = ibm.extract_sectors
    current = []

    def _get_bitstream(image, c, h, cell_ns):
        current[:] = [(c, h)]
        return get_bitstream(image, c, h, cell_ns)

    def _extract_sectors(bits):
        sectors = extract_sectors(bits)
        if current == [(cyl, head)]:
            sectors[sector] = (sectors[sector] + bytes(size))[:size]
        return sectors

    monkeypatch.setattr(ibm, "get_bitstream", _get_bitstream)
    monkeypatch.setattr(ibm, "extract_sectors", _extract_sectors)


class TestGeometry:

    def test_full_size_image(self):
        assert IMAGE_SIZE == 450560 == 80 * 5632
        assert find_size(IMAGE_SIZE) == Geometry(40, 2, 6)

    @pytest.mark.parametrize("size", [0, 1, 5632, 225280, 450559, 450561,
                                      901120])
    def test_other_sizes(self, size):
        assert find_size(size) == Geometry(0, 0, 0)
        assert find_size(size).cyls == 0

    def test_identify(self, fmt):
        assert fmt.identify(IMAGE_SIZE) == 50
        assert fmt.identify(IMAGE_SIZE + 1) == 0
        assert fmt.identify(0) == 0

    def test_registry_attributes(self, fmt):
        assert fmt.name == "esq8"
        assert fmt.description == "Ensoniq Mirage/SQ-80 floppy disk image"
        assert fmt.extensions == ["img"]
        assert fmt.supports_save is True
        assert fmt.find_size(IMAGE_SIZE) == find_size(IMAGE_SIZE)


class TestLayout:

    def test_sector_table(self):
        assert [s.r for s in esq8.SECTORS] == [0, 1, 2, 3, 4, 5]
        assert [s.size for s in esq8.SECTORS] == [1024]*5 + [512]
        assert [s.offset for s in esq8.SECTORS] == [0, 1024, 2048, 3072,
                                                   4096, 5120]
        assert sum(s.size for s in esq8.SECTORS) == esq8.TRACK_SIZE

    def test_layout_is_immutable(self):
        assert isinstance(esq8.ESQ_6_DESC, tuple)
        with pytest.raises(AttributeError):
            esq8.ESQ_6_DESC[0].count = 1

    def test_track_fills_nominal_cell_count(self, zero_image):
        for cyl, head in zero_image.track_list():
            assert len(zero_image.get_track(cyl, head).bits) == 109376

    def test_id_fields(self, random_image):
        t = ibm.IBMTrack(7, 1)
        t.decode_bits(random_image.get_track(7, 1).bits)
        assert len(t.iams) == 1
        ids = [(s.idam.c, s.idam.h, s.idam.r, s.idam.n) for s in t.sectors]
        assert ids == [(7, 1, r, 3) for r in range(5)] + [(7, 1, 5, 2)]
        assert t.nr_missing() == 0
        assert all(s.dam.mark == ibm.Mark.DAM for s in t.sectors)


class TestLoad:

    def test_all_zero_image(self, zero_image):
        assert zero_image.variant is Variant.DSDD
        assert zero_image.track_list() == [(c, h) for c in range(40)
                                           for h in range(2)]
        expected = [bytes(1024)] * 5 + [bytes(512)]
        for cyl, head in zero_image.track_list():
            bits = zero_image.get_track(cyl, head).bits
            assert ibm.extract_sectors(bits) == expected

    def test_sector_order(self, random_image, random_dat):
        for cyl, head in [(0, 0), (0, 1), (3, 1), (39, 0), (39, 1)]:
            bits = random_image.get_track(cyl, head).bits
            assert (ibm.extract_sectors(bits)
                    == split_sectors(track_chunk(random_dat, cyl, head)))

    def test_deterministic(self, fmt, random_image, random_dat):
        again = fmt.load(random_dat)
        assert again.track_list() == random_image.track_list()
        for cyl, head in again.track_list():
            assert again.get_track(cyl, head) == random_image.get_track(
                cyl, head)

    def test_short_read(self, fmt, monkeypatch):
        monkeypatch.setattr(esq8, "find_size",
                            lambda size: Geometry(40, 2, 6))
        with pytest.raises(error.Fatal, match="Short read"):
            fmt.load(bytes(1000))

    def test_load_file_wrong_size(self, fmt, tmp_path):
        path = tmp_path / "short.img"
        path.write_bytes(bytes(IMAGE_SIZE - 1))
        with pytest.raises(error.Fatal):
            fmt.load_file(str(path))


class TestSave:

    def test_round_trip(self, fmt, random_image, random_dat):
        assert fmt.save(random_image) == random_dat

    def test_round_trip_zero(self, fmt, zero_image):
        assert fmt.save(zero_image) == bytes(IMAGE_SIZE)

    def test_unformatted_counts_as_one_side(self, fmt, random_image,
                                            random_dat, monkeypatch):
        monkeypatch.setattr(ibm, "get_geometry",
                            lambda image, cell_ns: (0, 0, 0))
        out = fmt.save(random_image)
        assert len(out) == 40 * 5632 == 225280
        assert out == b"".join(track_chunk(random_dat, c, 0)
                               for c in range(40))

    def test_geometry_is_forced(self, fmt, random_image, random_dat,
                                monkeypatch):
        monkeypatch.setattr(ibm, "get_geometry",
                            lambda image, cell_ns: (80, 2, 9))
        assert fmt.save(random_image) == random_dat

    @pytest.mark.parametrize("sector,size", [(0, 1023), (0, 1025),
                                             (4, 1023), (4, 1025),
                                             (5, 511), (5, 513)])
    def test_sector_size_mismatch(self, fmt, random_image, monkeypatch,
                                  sector, size):
        resize_sector(monkeypatch, 3, 1, sector, size)
        with pytest.raises(error.SectorSizeError) as excinfo:
            fmt.save(random_image)
        err = excinfo.value
        assert (err.cyl, err.head, err.sector, err.size) == (3, 1, sector,
                                                            size)
        assert "T3.1: sector %d invalid size: %d" % (sector, size) in str(err)

    def test_missing_track(self, fmt, random_image):
        image = FloppyImage(cyls=40, heads=2)
        for cyl, head in random_image.track_list():
            if (cyl, head) != (5, 1):
                image.set_track(cyl, head, random_image.get_track(cyl, head))
        with pytest.raises(error.SectorSizeError) as excinfo:
            fmt.save(image)
        err = excinfo.value
        assert (err.cyl, err.head, err.sector, err.size) == (5, 1, 0, 0)

    def test_wrong_density(self, fmt, random_image):
        image = FloppyImage(cyls=40, heads=2)
        for cyl, head in random_image.track_list():
            track = random_image.get_track(cyl, head)
            if (cyl, head) == (20, 0):
                track = type(track)(track.bits, track.time_per_rev / 2)
            image.set_track(cyl, head, track)
        with pytest.raises(error.SectorSizeError, match="T20.0"):
            fmt.save(image)

    def test_save_file(self, fmt, random_image, random_dat, tmp_path):
        path = tmp_path / "out.img"
        fmt.save_file(str(path), random_image)
        assert path.read_bytes() == random_dat

    def test_failed_save_leaves_no_file(self, fmt, random_image,
                                        monkeypatch, tmp_path):
        resize_sector(monkeypatch, 10, 0, 5, 511)
        path = tmp_path / "out.img"
        with pytest.raises(error.SectorSizeError) as excinfo:
            fmt.save_file(str(path), random_image)
        err = excinfo.value
        assert (err.cyl, err.sector, err.size) == (10, 5, 511)
        assert not path.exists()

    def test_no_clobber(self, fmt, random_image, image_file):
        before = image_file.read_bytes()
        with pytest.raises(FileExistsError):
            fmt.save_file(str(image_file), random_image, noclobber=True)
        assert image_file.read_bytes() == before

    def test_save_unsupported(self, random_image, tmp_path):
        class ReadOnly(ESQ8IMG):
            supports_save = False
        path = tmp_path / "out.img"
        with pytest.raises(error.Fatal, match="Cannot create"):
            ReadOnly().save_file(str(path), random_image)
        assert not path.exists()
