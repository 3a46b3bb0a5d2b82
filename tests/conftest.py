import random

import pytest

from esq8img.image.esq8 import ESQ8IMG, CYLS, TRACK_SIZE

IMAGE_SIZE = CYLS * 2 * TRACK_SIZE


def random_bytes(n, seed=8):
    rnd = random.Random(seed)
    return bytes(rnd.getrandbits(8) for _ in range(n))


@pytest.fixture(scope="session")
def fmt():
    return ESQ8IMG()


@pytest.fixture(scope="session")
def random_dat():
    return random_bytes(IMAGE_SIZE)


@pytest.fixture(scope="session")
def random_image(fmt, random_dat):
    return fmt.load(random_dat)


@pytest.fixture(scope="session")
def zero_image(fmt):
    return fmt.load(bytes(IMAGE_SIZE))


@pytest.fixture
def image_file(tmp_path, random_dat):
    path = tmp_path / "disk.img"
    path.write_bytes(random_dat)
    return path
