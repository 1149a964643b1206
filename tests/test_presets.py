import pytest

from storeshot.presets import (
    PRESET_DIMENSIONS,
    StorePresets,
    get_dimensions,
    get_preset_options,
    grouped_presets,
    parse_dimension_string,
)


def test_default_is_largest_iphone():
    assert get_dimensions() == (1290, 2796)


@pytest.mark.parametrize("preset,expected", [
    ("ios_iphone_63", (1179, 2556)),
    ("ios_ipad_13", (2064, 2752)),
    ("android_16_9", (1920, 1080)),
    ("Android-Tab-L", (1920, 1200)),
    ("1242x2688", (1242, 2688)),
])
def test_get_dimensions_from_preset(preset, expected):
    assert get_dimensions(preset=preset) == expected


def test_custom_size_overrides_preset():
    assert get_dimensions(preset="ios_iphone_69", width=640, height=480) == (640, 480)


@pytest.mark.parametrize("width,height", [(640, None), (None, 480)])
def test_partial_custom_size_rejected(width, height):
    with pytest.raises(ValueError, match="both width and height"):
        get_dimensions(preset="ios_iphone_69", width=width, height=height)


def test_zero_custom_size_is_passed_through():
    # Left for ExportParameters to reject as non-positive
    assert get_dimensions(width=0, height=480) == (0, 480)


def test_unknown_preset_rejected():
    with pytest.raises(ValueError, match="Unknown preset"):
        get_dimensions(preset="ios_watch")


@pytest.mark.parametrize("text,expected", [
    ("1080x1920", (1080, 1920)),
    ("2160 x 3840", (2160, 3840)),
    ("1080×1920", (1080, 1920)),
    ("1080X1920", (1080, 1920)),
    ("wide", None),
    ("1080x", None),
])
def test_parse_dimension_string(text, expected):
    assert parse_dimension_string(text) == expected


def test_preset_options_cover_every_preset():
    options = get_preset_options()

    assert len(options) == len(StorePresets) == len(PRESET_DIMENSIONS) == 12
    first = options[0]
    assert first["id"] == "ios_iphone_69"
    assert first["dimensions"] == "1290x2796"
    assert first["group"] == "Apple iPhone"
    assert first["name"] == 'iPhone 6.9" Portrait 1290x2796'


def test_grouped_presets_keep_display_order():
    groups = grouped_presets()

    assert list(groups) == ["Apple iPhone", "Apple iPad", "Google Play"]
    assert [p["id"] for p in groups["Apple iPad"]] == [
        "ios_ipad_13", "ios_ipad_11", "ios_ipad_105", "ios_ipad_97",
    ]
    assert len(groups["Google Play"]) == 5
