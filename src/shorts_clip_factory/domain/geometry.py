from __future__ import annotations

import math

from .models import CropGeometry

TARGET_WIDTH = 1080
TARGET_HEIGHT = 1920


def _round(value: float) -> int:
    return math.floor(value + 0.5)


def compute_crop(
    source_width: int,
    source_height: int,
    target_width: int = TARGET_WIDTH,
    target_height: int = TARGET_HEIGHT,
    focus_x: float = 0.5,
) -> CropGeometry:
    """Portrait crop window for a source frame.

    Wider sources keep full height and slide the window horizontally by
    ``focus_x``; narrower sources keep full width and are centred vertically.
    """
    if source_width <= 0 or source_height <= 0:
        raise ValueError(f"invalid source size: {source_width}x{source_height}")
    if target_width <= 0 or target_height <= 0:
        raise ValueError(f"invalid target size: {target_width}x{target_height}")

    focus = min(1.0, max(0.0, float(focus_x)))
    target_ratio = target_width / target_height
    source_ratio = source_width / source_height

    if source_ratio > target_ratio:
        crop_height = source_height
        crop_width = min(source_width, _round(source_height * target_ratio))
        max_x = source_width - crop_width
        crop_x = max(0, min(_round(max_x * focus), max_x))
        crop_y = 0
    else:
        crop_width = source_width
        crop_height = min(source_height, _round(source_width / target_ratio))
        crop_x = 0
        crop_y = _round((source_height - crop_height) / 2)

    return CropGeometry(crop_width=crop_width, crop_height=crop_height, crop_x=crop_x, crop_y=crop_y)
