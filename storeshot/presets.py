"""
Store screenshot size presets.

Covers the portrait/landscape sizes accepted by:
- Apple App Store (iPhone and iPad)
- Google Play (phones and tablets)
- Custom dimensions
"""

import re
from collections import OrderedDict
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple


class StorePresets(Enum):
    """Common store screenshot presets."""

    # Apple iPhone
    IOS_IPHONE_69 = "ios_iphone_69"   # 6.9" display
    IOS_IPHONE_65 = "ios_iphone_65"   # 6.5" display
    IOS_IPHONE_63 = "ios_iphone_63"   # 6.3" display

    # Apple iPad
    IOS_IPAD_13 = "ios_ipad_13"
    IOS_IPAD_11 = "ios_ipad_11"
    IOS_IPAD_105 = "ios_ipad_105"
    IOS_IPAD_97 = "ios_ipad_97"

    # Google Play
    ANDROID_9_16 = "android_9_16"
    ANDROID_16_9 = "android_16_9"
    ANDROID_TALL = "android_tall"
    ANDROID_TAB_P = "android_tab_p"
    ANDROID_TAB_L = "android_tab_l"


@dataclass(frozen=True)
class DimensionSpec:
    """Specification for screenshot dimensions."""
    width: int
    height: int
    group: str
    description: str

    @property
    def size(self) -> Tuple[int, int]:
        return (self.width, self.height)

    @property
    def label(self) -> str:
        return f"{self.description} {self.width}x{self.height}"


PRESET_DIMENSIONS: Dict[StorePresets, DimensionSpec] = OrderedDict([
    (StorePresets.IOS_IPHONE_69, DimensionSpec(1290, 2796, "Apple iPhone", 'iPhone 6.9" Portrait')),
    (StorePresets.IOS_IPHONE_65, DimensionSpec(1284, 2778, "Apple iPhone", 'iPhone 6.5" Portrait')),
    (StorePresets.IOS_IPHONE_63, DimensionSpec(1179, 2556, "Apple iPhone", 'iPhone 6.3" Portrait')),
    (StorePresets.IOS_IPAD_13, DimensionSpec(2064, 2752, "Apple iPad", 'iPad 13" Portrait')),
    (StorePresets.IOS_IPAD_11, DimensionSpec(1668, 2388, "Apple iPad", 'iPad 11" Portrait')),
    (StorePresets.IOS_IPAD_105, DimensionSpec(1668, 2224, "Apple iPad", 'iPad 10.5" Portrait')),
    (StorePresets.IOS_IPAD_97, DimensionSpec(1536, 2048, "Apple iPad", 'iPad 9.7" Portrait')),
    (StorePresets.ANDROID_9_16, DimensionSpec(1080, 1920, "Google Play", "Android Portrait")),
    (StorePresets.ANDROID_16_9, DimensionSpec(1920, 1080, "Google Play", "Android Landscape")),
    (StorePresets.ANDROID_TALL, DimensionSpec(1080, 2340, "Google Play", "Android Tall")),
    (StorePresets.ANDROID_TAB_P, DimensionSpec(1200, 1920, "Google Play", "Android Tablet Portrait")),
    (StorePresets.ANDROID_TAB_L, DimensionSpec(1920, 1200, "Google Play", "Android Tablet Landscape")),
])

DEFAULT_PRESET = StorePresets.IOS_IPHONE_69


def parse_dimension_string(dim_str: str) -> Optional[Tuple[int, int]]:
    """
    Parse dimension string like "1290x2796" or "1080 × 1920".

    Args:
        dim_str: Dimension string in WxH format

    Returns:
        Tuple of (width, height) or None if parsing fails
    """
    match = re.fullmatch(r'(\d+)\s*[x×]\s*(\d+)', dim_str.strip(), re.IGNORECASE)
    if match:
        return (int(match.group(1)), int(match.group(2)))
    return None


def get_dimensions(
    preset: Optional[str] = None,
    width: Optional[int] = None,
    height: Optional[int] = None,
    default: StorePresets = DEFAULT_PRESET,
) -> Tuple[int, int]:
    """
    Get screenshot dimensions from custom values or a preset.

    Custom width and height win over the preset, matching the "use custom
    size" switch in the UI.

    Args:
        preset: Preset key (e.g., "ios_iphone_69") or "WxH" string
        width: Custom width
        height: Custom height
        default: Preset used when nothing else matches

    Returns:
        Tuple of (width, height)

    Raises:
        ValueError: for an unknown preset name, or when only one of
            width and height is given

    Examples:
        >>> get_dimensions(preset="android_9_16")
        (1080, 1920)
        >>> get_dimensions(width=1242, height=2688)
        (1242, 2688)
    """
    if width is not None or height is not None:
        if width is None or height is None:
            raise ValueError(
                f"Custom size needs both width and height, got width={width} height={height}"
            )
        return (width, height)

    if preset:
        preset_key = preset.lower().replace("-", "_").replace(" ", "_")
        for p, spec in PRESET_DIMENSIONS.items():
            if p.value == preset_key:
                return spec.size

        parsed = parse_dimension_string(preset)
        if parsed:
            return parsed

        raise ValueError(f"Unknown preset '{preset}'")

    return PRESET_DIMENSIONS[default].size


def get_preset_options() -> List[dict]:
    """Get list of available preset options for user selection."""
    return [
        {
            "id": preset.value,
            "name": dim.label,
            "group": dim.group,
            "dimensions": f"{dim.width}x{dim.height}",
        }
        for preset, dim in PRESET_DIMENSIONS.items()
    ]


def grouped_presets() -> Dict[str, List[dict]]:
    """Preset options grouped by store/device family, in display order."""
    groups: Dict[str, List[dict]] = OrderedDict()
    for option in get_preset_options():
        groups.setdefault(option["group"], []).append(option)
    return groups
