import threading

import pytest

import storeshot.exporter as exporter
from storeshot.errors import DecodeError, EncodingError
from storeshot.exporter import ExportStage, export_image, export_processed, render
from storeshot.params import ExportParameters
from storeshot.source import SourceImage, load_source, open_source

from helpers import decode, make_image, to_bytes

RED = (255, 0, 0, 255)
BLACK = (0, 0, 0, 255)


def close_to(pixel, expected, tolerance=2):
    return all(abs(a - b) <= tolerance for a, b in zip(pixel, expected))


@pytest.mark.asyncio
async def test_scenario_fill_exact_target(landscape_png):
    params = ExportParameters(1290, 2796, mode="fill", output_format="png")
    result = await export_processed(landscape_png, params, name="wide.png")

    image = decode(result.data)
    assert image.size == (1290, 2796)
    # no background anywhere: fully opaque
    assert image.convert("RGBA").getextrema()[3] == (255, 255)
    # crop is centred on the blue/green seam
    assert close_to(image.getpixel((100, 1400))[:3], (0, 0, 255))
    assert close_to(image.getpixel((1190, 1400))[:3], (0, 255, 0))


@pytest.mark.asyncio
async def test_scenario_fit_solid_bars(square_png):
    params = ExportParameters(
        1080, 1920, mode="fit", output_format="png", background="solid", solid_color="#000000"
    )
    result = await export_processed(square_png, params)

    image = decode(result.data).convert("RGBA")
    assert image.size == (1080, 1920)
    assert image.getpixel((540, 0)) == BLACK
    assert image.getpixel((540, 419)) == BLACK
    assert close_to(image.getpixel((540, 421)), RED)
    assert close_to(image.getpixel((540, 960)), RED)
    assert close_to(image.getpixel((540, 1498)), RED)
    assert image.getpixel((540, 1500)) == BLACK
    assert image.getpixel((540, 1919)) == BLACK


@pytest.mark.asyncio
async def test_scenario_iphone_frame_size():
    data = to_bytes(make_image(1179, 2556, "#FFFFFF"))
    params = ExportParameters(1179, 2556, output_format="png", device_frame="iphone")
    result = await export_processed(data, params)

    assert (result.width, result.height) == (1259, 2656)
    assert decode(result.data).size == (1259, 2656)
    assert params.framed_size == (1259, 2656)


def test_fit_transparent_keeps_letterbox_clear():
    with SourceImage(make_image(100, 100, "#FF0000")) as source:
        image = render(source, ExportParameters(100, 200, mode="fit", background="transparent"))

    assert image.size == (100, 200)
    assert image.getpixel((50, 10))[3] == 0
    assert close_to(image.getpixel((50, 100)), RED)


def test_fit_gradient_behind_image():
    with SourceImage(make_image(100, 100, "#FF0000")) as source:
        image = render(source, ExportParameters(
            100, 300, mode="fit", background="gradient", gradient_start="#000000", gradient_end="#0000ff"
        ))

    assert image.getpixel((50, 0)) == BLACK
    assert image.getpixel((50, 299)) == (0, 0, 255, 255)
    assert close_to(image.getpixel((50, 150)), RED)


def test_fit_zoom_in_is_clipped_to_target():
    with SourceImage(make_image(100, 100, "#FF0000")) as source:
        image = render(source, ExportParameters(100, 100, mode="fit", zoom=150))

    assert image.size == (100, 100)
    assert close_to(image.getpixel((0, 0)), RED)


def test_background_ignored_in_fill_mode():
    with SourceImage(make_image(10, 10, (255, 0, 0, 0))) as source:
        image = render(source, ExportParameters(20, 20, mode="fill", background="solid", solid_color="#00ff00"))

    assert image.getpixel((10, 10))[3] == 0


def test_export_image_is_repeatable():
    params = ExportParameters(64, 128, mode="fit", output_format="png", background="solid")
    with open_source(to_bytes(make_image(50, 30, "#123456"))) as source:
        first = export_image(source, params)
        second = export_image(source, params)

    assert first.data == second.data


@pytest.mark.asyncio
async def test_decode_failure_is_tagged_with_stage():
    with pytest.raises(DecodeError) as excinfo:
        await export_processed(b"definitely not an image", ExportParameters(10, 10), name="junk.png")

    assert excinfo.value.stage is ExportStage.LOADING
    assert "junk.png" in str(excinfo.value)


@pytest.mark.asyncio
async def test_empty_upload_is_decode_error():
    with pytest.raises(DecodeError):
        await export_processed(b"", ExportParameters(10, 10))


@pytest.mark.asyncio
async def test_encoding_failure_is_tagged_and_source_released(monkeypatch, small_png):
    opened = []

    def tracking_load(data, name=None):
        source = load_source(data, name)
        opened.append(source)
        return source

    def failing_encode(image, output_format, quality):
        raise EncodingError("no codec")

    monkeypatch.setattr(exporter, "load_source", tracking_load)
    monkeypatch.setattr(exporter, "encode", failing_encode)

    with pytest.raises(EncodingError) as excinfo:
        await export_processed(small_png, ExportParameters(30, 30))

    assert excinfo.value.stage is ExportStage.ENCODING
    assert len(opened) == 1 and opened[0].closed


@pytest.mark.asyncio
async def test_source_released_after_success(monkeypatch, small_png):
    opened = []

    def tracking_load(data, name=None):
        source = load_source(data, name)
        opened.append(source)
        return source

    monkeypatch.setattr(exporter, "load_source", tracking_load)
    await export_processed(small_png, ExportParameters(30, 30, output_format="png"))

    assert opened[0].closed


@pytest.mark.asyncio
async def test_render_runs_off_the_event_loop(monkeypatch, small_png):
    loop_thread = threading.get_ident()
    render_threads = []

    def tracking_render(source, params):
        render_threads.append(threading.get_ident())
        return render(source, params)

    monkeypatch.setattr(exporter, "render", tracking_render)
    result = await export_processed(small_png, ExportParameters(30, 30, output_format="png"))

    assert result.dimensions == (30, 30)
    assert render_threads and render_threads[0] != loop_thread


def test_exif_orientation_is_applied():
    image = make_image(40, 20, "#FF0000").convert("RGB")
    exif = image.getexif()
    exif[0x0112] = 6  # rotate 90 CW on display
    data = to_bytes(image, "JPEG", exif=exif.tobytes())

    with open_source(data) as source:
        assert (source.width, source.height) == (20, 40)
        assert source.format == "JPEG"
