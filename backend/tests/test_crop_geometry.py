import pytest

from domain.models import CropSpec, FRAME_HEIGHT, FRAME_WIDTH, Placement
from services.crop_geometry import contain_placement, cover_crop, source_box_for_placement


def test_zoom_two_on_square_source_is_centered():
    rect = cover_crop(1000, 1000, FRAME_WIDTH, FRAME_HEIGHT, CropSpec(zoom=2.0))
    # ratio 1 > 0.8: fit the height, 1000/2 = 500 tall, 400 wide
    assert rect.sw == pytest.approx(400)
    assert rect.sh == pytest.approx(500)
    assert rect.sx == pytest.approx(300)
    assert rect.sy == pytest.approx(250)


@pytest.mark.parametrize("src", [(4000, 3000), (1200, 3000), (1080, 1350), (37, 1000)])
def test_neutral_crop_is_centered_with_frame_aspect(src):
    src_w, src_h = src
    rect = cover_crop(src_w, src_h, FRAME_WIDTH, FRAME_HEIGHT, CropSpec())
    assert rect.sw / rect.sh == pytest.approx(FRAME_WIDTH / FRAME_HEIGHT)
    assert rect.sx + rect.sw / 2 == pytest.approx(src_w / 2)
    assert rect.sy + rect.sh / 2 == pytest.approx(src_h / 2)
    # zoom 1 selects the largest frame-shaped rectangle inside the source
    assert rect.sw <= src_w + 1e-9 and rect.sh <= src_h + 1e-9
    assert rect.sw == pytest.approx(src_w) or rect.sh == pytest.approx(src_h)


def test_missing_crop_matches_neutral_crop():
    assert cover_crop(800, 600, FRAME_WIDTH, FRAME_HEIGHT) == cover_crop(
        800, 600, FRAME_WIDTH, FRAME_HEIGHT, CropSpec()
    )


def test_offsets_move_by_share_of_slack():
    rect = cover_crop(2000, 1000, FRAME_WIDTH, FRAME_HEIGHT, CropSpec(offset_x=100))
    # sh = 1000, sw = 800, slack = 1200; centered sx = 600, +100% -> 1800
    assert rect.sw == pytest.approx(800)
    assert rect.sx == pytest.approx(1800)

    rect = cover_crop(1000, 1000, FRAME_WIDTH, FRAME_HEIGHT, CropSpec(zoom=2.0, offset_y=-100))
    # slack_y = 500, centered sy = 250, -100% -> -250
    assert rect.sy == pytest.approx(-250)


def test_offset_y_beyond_slack_travels_by_source_height():
    rect = cover_crop(1000, 1000, FRAME_WIDTH, FRAME_HEIGHT, CropSpec(zoom=2.0, offset_y=150))
    # centered 250 + slack 500 + 50% of 1000
    assert rect.sy == pytest.approx(1250)
    assert rect.sy > 1000 - rect.sh  # past the bottom edge, left unclamped

    rect = cover_crop(1000, 1000, FRAME_WIDTH, FRAME_HEIGHT, CropSpec(zoom=2.0, offset_y=-200))
    assert rect.sy == pytest.approx(250 - 500 - 1000)


def test_contain_letterboxes_wide_photo_and_applies_shift():
    p = contain_placement(2000, 1000, FRAME_WIDTH, FRAME_HEIGHT)
    assert isinstance(p, Placement)
    assert (p.dx, p.dy, p.dw, p.dh) == pytest.approx((0, (FRAME_HEIGHT - 540) / 2, FRAME_WIDTH, 540))

    shifted = contain_placement(2000, 1000, FRAME_WIDTH, FRAME_HEIGHT, vertical_shift=-50)
    assert shifted.dy == pytest.approx(p.dy - (FRAME_HEIGHT - 540) * 0.5)


def test_contain_without_vertical_letterbox_shifts_by_drawn_height():
    # tall photo fills the height; pillarboxed left/right
    p = contain_placement(500, 1350, FRAME_WIDTH, FRAME_HEIGHT, vertical_shift=-20)
    assert p.dh == pytest.approx(FRAME_HEIGHT)
    assert p.dx == pytest.approx((FRAME_WIDTH - 500) / 2)
    assert p.dy == pytest.approx(-0.2 * FRAME_HEIGHT)


def test_source_box_inverts_placement():
    p = contain_placement(2000, 1000, FRAME_WIDTH, FRAME_HEIGHT, vertical_shift=-30)
    box = source_box_for_placement(2000, 1000, FRAME_WIDTH, FRAME_HEIGHT, p)
    scale = p.dw / 2000
    # frame origin maps to the source point that lands at (0, 0)
    assert box.sx * scale + p.dx == pytest.approx(0)
    assert box.sy * scale + p.dy == pytest.approx(0)
    assert box.sw * scale == pytest.approx(FRAME_WIDTH)
    assert box.sh * scale == pytest.approx(FRAME_HEIGHT)
