import dataclasses

import pytest

from storeshot.params import (
    FRAME_CORNER_RADIUS,
    FRAME_PADDING,
    DeviceFrame,
    ExportParameters,
    FitBackground,
    FitMode,
    OutputFormat,
    clamp_zoom,
)


def test_defaults():
    params = ExportParameters(1290, 2796)

    assert params.mode is FitMode.FILL
    assert params.output_format is OutputFormat.WEBP
    assert params.quality == 82
    assert params.background is FitBackground.TRANSPARENT
    assert params.device_frame is DeviceFrame.NONE
    assert params.zoom_factor == 1.0
    assert params.framed_size == (1290, 2796)
    assert params.corner_radius is None


def test_strings_are_coerced():
    params = ExportParameters(
        "100", "200", mode="FIT", output_format="image/jpeg", background="gradient", device_frame="ipad"
    )

    assert params.target_size == (100, 200)
    assert params.mode is FitMode.FIT
    assert params.output_format is OutputFormat.JPEG
    assert params.background is FitBackground.GRADIENT
    assert params.device_frame is DeviceFrame.IPAD
    assert params.corner_radius == 32


@pytest.mark.parametrize("width,height", [(0, 100), (100, 0), (-1, 5)])
def test_non_positive_size_rejected(width, height):
    with pytest.raises(ValueError, match="positive"):
        ExportParameters(width, height)


@pytest.mark.parametrize("field,value", [
    ("mode", "stretch"),
    ("output_format", "gif"),
    ("background", "blur"),
    ("device_frame", "pixel"),
])
def test_unknown_enum_values_rejected(field, value):
    with pytest.raises(ValueError):
        ExportParameters(10, 10, **{field: value})


def test_parameters_are_immutable():
    params = ExportParameters(10, 10)
    with pytest.raises(dataclasses.FrozenInstanceError):
        params.quality = 50


@pytest.mark.parametrize("value,expected", [
    ("webp", OutputFormat.WEBP),
    ("image/webp", OutputFormat.WEBP),
    ("jpg", OutputFormat.JPEG),
    ("JPEG", OutputFormat.JPEG),
    ("image/png", OutputFormat.PNG),
])
def test_output_format_parse(value, expected):
    assert OutputFormat.parse(value) is expected


def test_output_format_metadata():
    assert OutputFormat.JPEG.mime_type == "image/jpeg"
    assert OutputFormat.JPEG.extension == "jpg"
    assert OutputFormat.WEBP.extension == "webp"
    assert not OutputFormat.JPEG.supports_alpha
    assert OutputFormat.PNG.supports_alpha


@pytest.mark.parametrize("zoom,expected", [(100, 1.0), (80, 0.8), (120, 1.2), (10, 0.5), (500, 2.0)])
def test_clamp_zoom(zoom, expected):
    assert clamp_zoom(zoom) == pytest.approx(expected)


def test_frame_tables():
    assert FRAME_PADDING[DeviceFrame.NONE].horizontal == 0
    assert FRAME_PADDING[DeviceFrame.IPHONE].vertical == 100
    assert FRAME_PADDING[DeviceFrame.IPAD].horizontal == 120
    assert FRAME_CORNER_RADIUS == {DeviceFrame.IPHONE: 36, DeviceFrame.IPAD: 32, DeviceFrame.ANDROID: 28}


def test_framed_size_for_android():
    assert ExportParameters(1080, 1920, device_frame="android").framed_size == (1144, 2008)


def test_zoom_string_is_coerced():
    params = ExportParameters(100, 100, zoom="120")

    assert params.zoom == 120.0
    assert params.zoom_factor == pytest.approx(1.2)


@pytest.mark.parametrize("zoom", ["big", None, "nan", "inf"])
def test_invalid_zoom_rejected(zoom):
    with pytest.raises(ValueError, match="zoom"):
        ExportParameters(100, 100, zoom=zoom)


@pytest.mark.parametrize("quality", ["high", None])
def test_invalid_quality_rejected(quality):
    with pytest.raises(ValueError, match="quality"):
        ExportParameters(100, 100, quality=quality)
