import pytest

from helpers import make_image, to_bytes


@pytest.fixture
def square_png():
    """800x800 opaque red PNG."""
    return to_bytes(make_image(800, 800, "#FF0000"))


@pytest.fixture
def landscape_png():
    """3000x2000 PNG, left half blue and right half green."""
    image = make_image(3000, 2000, "#0000FF")
    image.paste((0, 255, 0, 255), (1500, 0, 3000, 2000))
    return to_bytes(image)


@pytest.fixture
def small_png():
    """Cheap 60x40 PNG for HTTP tests."""
    return to_bytes(make_image(60, 40, "#FF5733"))
