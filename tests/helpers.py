import io

from PIL import Image


def make_image(width, height, color="#3498DB", mode="RGBA"):
    return Image.new(mode, (width, height), color)


def to_bytes(image, format="PNG", **params):
    buffer = io.BytesIO()
    image.save(buffer, format=format, **params)
    return buffer.getvalue()


def decode(data):
    image = Image.open(io.BytesIO(data))
    image.load()
    return image
