"""Unit tests for normalized-to-pixel box mapping."""
import itertools

import pytest

from app.utils.geometry import PixelBox, map_box


class TestMapBox:
    """Test map_box conversions."""

    def test_centered_box_on_square_image(self):
        """[250, 250, 750, 750] on 400x400 maps to (100,100)-(300,300)."""
        box = map_box([250, 250, 750, 750], 400, 400)

        assert box == PixelBox(x0=100, y0=100, x1=300, y1=300)
        assert box.width == 200
        assert box.height == 200

    def test_y_scales_with_height_and_x_with_width(self):
        box = map_box([0, 0, 500, 1000], 200, 100)

        assert box.as_tuple() == (0, 0, 200, 50)

    def test_rounds_half_up(self):
        # 500 / 1000 * 3 = 1.5
        box = map_box([0, 500, 1000, 1000], 3, 3)

        assert box.x0 == 2

    def test_out_of_range_coordinates_are_clamped(self):
        box = map_box([-50, -10, 1200, 1001], 640, 480)

        assert box.as_tuple() == (0, 0, 640, 480)

    def test_degenerate_height_is_one_pixel(self):
        box = map_box([400, 100, 400, 900], 500, 500)

        assert box.height == 1
        assert box.width == 400

    def test_degenerate_width_is_one_pixel(self):
        box = map_box([100, 400, 900, 400], 500, 500)

        assert box.width == 1
        assert box.height == 400

    def test_reversed_box_is_widened_not_rejected(self):
        box = map_box([900, 900, 100, 100], 100, 100)

        assert (box.width, box.height) == (1, 1)
        assert box.x1 <= 100 and box.y1 <= 100

    def test_box_at_far_edge_stays_inside_image(self):
        box = map_box([1000, 1000, 1000, 1000], 50, 20)

        assert box.as_tuple() == (49, 19, 50, 20)

    def test_accepts_float_coordinates(self):
        box = map_box([250.4, 250.6, 750.0, 750.0], 1000, 1000)

        assert (box.y0, box.x0) == (250, 251)

    @pytest.mark.parametrize("width,height", [(0, 10), (10, 0), (-1, -1)])
    def test_rejects_non_positive_image_size(self, width, height):
        with pytest.raises(ValueError):
            map_box([0, 0, 1000, 1000], width, height)

    @pytest.mark.parametrize("width,height", [(1, 1), (1, 7), (400, 400), (640, 480), (1023, 17)])
    def test_output_always_within_bounds(self, width, height):
        """Every in-range box yields a non-empty box inside the image."""
        values = [0, 1, 250, 499, 500, 999, 1000]

        for coords in itertools.product(values, repeat=4):
            box = map_box(coords, width, height)
            assert 0 <= box.x0 < box.x1 <= width, (coords, box)
            assert 0 <= box.y0 < box.y1 <= height, (coords, box)
