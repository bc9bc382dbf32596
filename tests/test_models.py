import pytest
from pydantic import ValidationError

from watermark_api.models.watermark import (
    Anchor,
    DiagonalTilePlacement,
    GridPlacement,
    ImageContent,
    OutputFormat,
    SinglePlacement,
    TextContent,
    WatermarkKind,
    WatermarkOptions,
)


def test_defaults_follow_single_bottom_right() -> None:
    options = WatermarkOptions(type="text", text="hello")
    spec = options.to_spec()

    assert spec.kind == WatermarkKind.text
    assert spec.placement == SinglePlacement(Anchor.bottom_right, 24)
    assert spec.opacity == pytest.approx(0.18)
    assert spec.rotation_degrees == -30
    assert spec.output_format == OutputFormat.png
    assert spec.quality == 90
    assert spec.content == TextContent(text="hello", font_id="Roboto", font_size_px=32, font_weight=400, color_hex="#FFFFFF")


def test_form_strings_are_coerced() -> None:
    options = WatermarkOptions.model_validate(
        {"type": "text", "text": "t", "mode": "grid", "spacing_px": "150", "opacity": "0.4", "output_format": "JPG"}
    )

    assert options.to_spec().placement == GridPlacement(150)
    assert options.opacity == pytest.approx(0.4)
    assert options.output_format == OutputFormat.jpeg


def test_hyphenated_anchor_is_normalised() -> None:
    options = WatermarkOptions(type="text", text="t", position="Top-Center")
    assert options.position == Anchor.top_center


def test_image_kind_carries_overlay_bytes() -> None:
    spec = WatermarkOptions(type="image", mode="diagonal_tile", wm_scale=0.5).to_spec(b"png-bytes")

    assert spec.kind == WatermarkKind.image
    assert spec.content == ImageContent(overlay_bytes=b"png-bytes", scale=0.5)
    assert spec.placement == DiagonalTilePlacement(280)


@pytest.mark.parametrize(
    "fields",
    [
        {"type": "text"},
        {"type": "text", "text": "   "},
        {"type": "text", "text": "x" * 201},
        {"type": "text", "text": "x", "color": "red"},
        {"type": "text", "text": "x", "spacing_px": 10},
        {"type": "text", "text": "x", "margin_px": 501},
        {"type": "text", "text": "x", "font_size": 600},
        {"type": "text", "text": "x", "angle_deg": 181},
        {"type": "text", "text": "x", "position": "middle"},
        {"type": "image", "wm_scale": 0},
        {"type": "video"},
    ],
)
def test_invalid_options_are_rejected(fields) -> None:
    with pytest.raises(ValidationError):
        WatermarkOptions.model_validate(fields)


def test_text_limit_counts_code_points() -> None:
    options = WatermarkOptions(type="text", text="ก" * 200)
    assert len(options.text) == 200
