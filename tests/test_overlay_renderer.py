import pytest

from watermark_api.core.errors import InvalidWatermarkImage, ProcessingError
from watermark_api.models.watermark import (
    GridPlacement,
    ImageContent,
    SinglePlacement,
    TextContent,
    WatermarkSpec,
)
from watermark_api.services.overlay_renderer import OverlayRenderer, clean_text, hex_to_rgb, overlay_bound
from watermark_api.services.raster_codec import RasterCodec


def _text_spec(opacity: float = 1.0, rotation: int = 0, **content) -> WatermarkSpec:
    fields = {"text": "© 2025", "font_id": "Roboto", "font_size_px": 32}
    fields.update(content)
    return WatermarkSpec(
        content=TextContent(**fields),
        placement=SinglePlacement(),
        opacity=opacity,
        rotation_degrees=rotation,
    )


def _image_spec(data, scale: float = 0.2, opacity: float = 1.0) -> WatermarkSpec:
    return WatermarkSpec(
        content=ImageContent(overlay_bytes=data, scale=scale),
        placement=GridPlacement(200),
        opacity=opacity,
        rotation_degrees=0,
    )


class ExhaustedCodec(RasterCodec):
    def rotate(self, image, degrees):
        raise MemoryError("cannot allocate rotated overlay")


def _alpha_sum(image) -> int:
    return sum(image.getchannel("A").getdata())


def test_text_overlay_is_rgba_with_visible_pixels() -> None:
    overlay = OverlayRenderer().render(_text_spec(), 800, 600)

    assert overlay.mode == "RGBA"
    assert overlay.width > overlay.height > 0
    assert overlay.getchannel("A").getextrema()[1] == 255


def test_text_overlay_alpha_grows_with_opacity() -> None:
    renderer = OverlayRenderer()
    faint = renderer.render(_text_spec(opacity=0.1), 800, 600)
    strong = renderer.render(_text_spec(opacity=0.9), 800, 600)

    assert faint.size == strong.size
    assert _alpha_sum(strong) > _alpha_sum(faint) > 0


def test_zero_opacity_gives_fully_transparent_overlay() -> None:
    overlay = OverlayRenderer().render(_text_spec(opacity=0.0), 800, 600)
    assert overlay.getchannel("A").getextrema() == (0, 0)


def test_text_rendering_is_deterministic() -> None:
    renderer = OverlayRenderer()
    first = renderer.render(_text_spec(opacity=0.5, rotation=-30), 800, 600)
    second = renderer.render(_text_spec(opacity=0.5, rotation=-30), 800, 600)

    assert first.size == second.size
    assert first.tobytes() == second.tobytes()


def test_text_rotation_turns_the_block_around_its_center() -> None:
    renderer = OverlayRenderer()
    flat = renderer.render(_text_spec(rotation=0), 800, 600)
    upright = renderer.render(_text_spec(rotation=90), 800, 600)

    assert upright.size == (flat.height, flat.width)


def test_text_color_is_applied() -> None:
    overlay = OverlayRenderer().render(_text_spec(color_hex="#FF0000"), 800, 600)
    opaque = [pixel for pixel in overlay.getdata() if pixel[3] == 255]

    assert opaque
    assert all(pixel[:3] == (255, 0, 0) for pixel in opaque)


def test_unknown_font_falls_back_instead_of_failing() -> None:
    overlay = OverlayRenderer().render(_text_spec(font_id="../../etc/passwd"), 800, 600)
    assert overlay.width > 0


def test_heavy_weight_renders_bolder_text() -> None:
    renderer = OverlayRenderer()
    regular = renderer.render(_text_spec(font_weight=400), 800, 600)
    heavy = renderer.render(_text_spec(font_weight=800), 800, 600)

    assert _alpha_sum(heavy) > _alpha_sum(regular)


def test_image_overlay_longest_side_follows_shorter_target_side(make_image) -> None:
    data = make_image((200, 100), (255, 0, 0, 255), mode="RGBA")
    overlay = OverlayRenderer().render(_image_spec(data, scale=0.2), 1000, 800)

    assert overlay.size == (160, 80)


def test_image_overlay_may_be_enlarged(make_image) -> None:
    data = make_image((20, 10), (0, 0, 255, 255), mode="RGBA")
    overlay = OverlayRenderer(allow_upscale=True).render(_image_spec(data, scale=1.0), 100, 100)

    assert overlay.size == (100, 50)


def test_image_overlay_upscale_can_be_capped(make_image) -> None:
    data = make_image((20, 10), (0, 0, 255, 255), mode="RGBA")
    overlay = OverlayRenderer(allow_upscale=False).render(_image_spec(data, scale=1.0), 100, 100)

    assert overlay.size == (20, 10)


def test_image_overlay_bakes_opacity(make_image) -> None:
    data = make_image((10, 10), (0, 0, 255, 255), mode="RGBA")
    overlay = OverlayRenderer().render(_image_spec(data, scale=0.1, opacity=0.5), 100, 100)

    assert overlay.getpixel((5, 5))[3] == 128


@pytest.mark.parametrize("data", [None, b"", b"definitely not an image"])
def test_missing_or_broken_watermark_image_is_rejected(data) -> None:
    with pytest.raises(InvalidWatermarkImage):
        OverlayRenderer().render(_image_spec(data), 500, 500)


def test_clean_text_flattens_to_a_single_line() -> None:
    assert clean_text("  hello\nworld\t!\x00 ") == "hello world !"


def test_hex_to_rgb() -> None:
    assert hex_to_rgb("#1A2b3C") == (26, 43, 60)
    assert hex_to_rgb("nonsense") == (255, 255, 255)


def test_overlay_bound_is_the_target_diagonal() -> None:
    assert overlay_bound(800, 600) == 1000
    assert overlay_bound(1, 1) == 2


def test_long_rotated_text_stays_within_the_target_diagonal() -> None:
    spec = _text_spec(rotation=45, text="W" * 200, font_size_px=512)

    overlay = OverlayRenderer().render(spec, 800, 600)

    # at most a 1000 x 1000 block turned by 45 degrees
    assert overlay.width * overlay.height <= 1415 * 1415
    assert overlay.getchannel("A").getextrema()[1] == 255


def test_oversized_image_overlay_is_cropped_to_the_target_diagonal(make_image) -> None:
    data = make_image((100, 50), (0, 128, 0, 255), mode="RGBA")

    overlay = OverlayRenderer(allow_upscale=True).render(_image_spec(data, scale=5.0), 800, 600)

    assert overlay.size == (1000, 1000)
    assert overlay.getpixel((500, 500)) == (0, 128, 0, 255)


def test_allocation_failure_becomes_processing_error() -> None:
    renderer = OverlayRenderer(codec=ExhaustedCodec())

    with pytest.raises(ProcessingError):
        renderer.render(_text_spec(rotation=30), 800, 600)
