from __future__ import annotations

from math import ceil
from typing import List, Tuple

from watermark_api.models.watermark import (
    Anchor,
    DiagonalTilePlacement,
    GridPlacement,
    Placement,
    Point,
    SinglePlacement,
)

# (الصف، العمود) لكل موضع
_ANCHOR_AXES = {
    Anchor.top_left: ("top", "left"),
    Anchor.top_center: ("top", "center"),
    Anchor.top_right: ("top", "right"),
    Anchor.center_left: ("center", "left"),
    Anchor.center: ("center", "center"),
    Anchor.center_right: ("center", "right"),
    Anchor.bottom_left: ("bottom", "left"),
    Anchor.bottom_center: ("bottom", "center"),
    Anchor.bottom_right: ("bottom", "right"),
}


def compute_positions(
    image_width: int,
    image_height: int,
    placement: Placement,
    overlay_width: int,
    overlay_height: int,
) -> Tuple[Point, ...]:
    """إرجاع زوايا الرسم العليا اليسرى للعلامة بترتيب الرسم."""
    if isinstance(placement, GridPlacement):
        return compute_grid_positions(image_width, image_height, placement.spacing_px)
    if isinstance(placement, DiagonalTilePlacement):
        return compute_diagonal_positions(image_width, image_height, placement.spacing_px)
    if isinstance(placement, SinglePlacement):
        point = compute_single_position(
            image_width,
            image_height,
            placement.position,
            placement.margin_px,
            overlay_width,
            overlay_height,
        )
        return (point,)

    raise TypeError(f"unsupported placement: {placement!r}")


def compute_single_position(
    image_width: int,
    image_height: int,
    position: Anchor,
    margin_px: int,
    overlay_width: int,
    overlay_height: int,
) -> Point:
    """
    وضع العلامة عند أحد المواضع التسعة.

    تبتعد العلامة عن الحواف بمقدار ``margin_px``، والمحور المتوسط يتجاهل الهامش.
    لا يوجد تقييد، فالعلامة الأكبر من الصورة قد تتجاوز حدودها.
    """
    row, column = _ANCHOR_AXES[Anchor(position)]
    x = _axis_offset(column, image_width, overlay_width, margin_px, near="left", far="right")
    y = _axis_offset(row, image_height, overlay_height, margin_px, near="top", far="bottom")
    return Point(x, y)


def _axis_offset(side: str, extent: int, size: int, margin: int, *, near: str, far: str) -> int:
    if side == near:
        return margin
    if side == far:
        return extent - size - margin
    return (extent - size) // 2


def compute_grid_positions(image_width: int, image_height: int, spacing_px: int) -> Tuple[Point, ...]:
    """
    نقطة لكل خلية بحجم ``spacing_px`` تبدأ بنصف خلية، صفًا بعد صف.

    الصورة الأصغر من خلية واحدة تحصل على نقطة الخلية الأولى.
    """
    offset = spacing_px // 2
    columns = max(1, ceil(image_width / spacing_px))
    rows = max(1, ceil(image_height / spacing_px))

    points: List[Point] = []
    for row in range(rows):
        for column in range(columns):
            points.append(Point(offset + column * spacing_px, offset + row * spacing_px))
    return tuple(points)


def compute_diagonal_positions(image_width: int, image_height: int, spacing_px: int) -> Tuple[Point, ...]:
    """
    تكرار متداخل كالطوب يتجاوز كل حافة بمقدار ``spacing_px``.

    الصفوف ذات الفهرس ``floor(y / spacing_px)`` الفردي تُزاح يمينًا بنصف خطوة.
    """
    stagger = spacing_px // 2
    points: List[Point] = []

    for y in range(-spacing_px, image_height + spacing_px, spacing_px):
        shift = stagger if (y // spacing_px) % 2 == 1 else 0
        for x in range(-spacing_px, image_width + spacing_px, spacing_px):
            points.append(Point(x + shift, y))
    return tuple(points)
