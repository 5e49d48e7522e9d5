import unittest

import numpy as np

from hall_annotator.evaluator import (
    PLACEHOLDER_BASE_COLOR,
    ColorShiftStrategy,
    MissingPreconditionError,
    RandomStrategy,
    crop_region,
    evaluate_occupancy,
    hex_to_rgb,
    rgb_to_hex,
    set_base_colors,
)
from hall_annotator.geometry import Point, SeatRect, Size
from hall_annotator.grid import HallView

CANVAS = Size(100, 100)


def _hall():
    h = HallView()
    h.add_row("A", 3)
    h.commit_seat_rectangle("A", 0, Point(0, 0), Point(40, 40))
    h.commit_seat_rectangle("A", 1, Point(50, 50), Point(90, 90))
    return h


def _image(bgr=(40, 40, 40), size=200):
    return np.full((size, size, 3), bgr, dtype=np.uint8)


class TestColors(unittest.TestCase):
    def test_hex_round_trip_values(self):
        self.assertEqual(hex_to_rgb("#7b7b7b"), (123, 123, 123))
        self.assertEqual(rgb_to_hex((255.4, 0, 16)), "#ff0010")
        with self.assertRaises(ValueError):
            hex_to_rgb("#rgb(1,2,3)")

    def test_crop_scales_into_image(self):
        img = _image(size=200)
        img[100:180, 100:180] = (0, 0, 255)
        region = crop_region(img, SeatRect(Point(50, 50), Point(90, 90)), CANVAS)
        self.assertEqual(region.shape, (80, 80, 3))
        self.assertTrue((region == (0, 0, 255)).all())

    def test_crop_without_pixels(self):
        self.assertIsNone(crop_region("opaque", SeatRect(Point(0, 0), Point(10, 10)), CANVAS))


class TestBaseColors(unittest.TestCase):
    def test_requires_image(self):
        with self.assertRaises(MissingPreconditionError):
            set_base_colors(_hall(), None, CANVAS)

    def test_requires_a_mapped_seat(self):
        h = HallView()
        h.add_row("A", 3)
        with self.assertRaisesRegex(MissingPreconditionError, "map at least one seat"):
            set_base_colors(h, _image(), CANVAS)
        self.assertTrue(all(s.base_color is None for s in h.rows[0].seats))

    def test_only_mapped_seats(self):
        h = _hall()
        img = _image()
        img[100:180, 100:180] = (255, 0, 0)  # blue in BGR
        saved = set_base_colors(h, img, CANVAS)
        seats = h.rows[0].seats
        self.assertEqual(saved, 2)
        self.assertEqual(seats[0].base_color, "#282828")
        self.assertEqual(seats[1].base_color, "#0000ff")
        self.assertIsNone(seats[2].base_color)

    def test_placeholder_for_opaque_image(self):
        h = _hall()
        set_base_colors(h, object(), CANVAS)
        self.assertEqual(h.rows[0].seats[0].base_color, PLACEHOLDER_BASE_COLOR)


class TestOccupancy(unittest.TestCase):
    def test_requires_base_colors(self):
        with self.assertRaises(MissingPreconditionError):
            evaluate_occupancy(_hall(), _image(), ColorShiftStrategy(), CANVAS)

    def test_color_shift(self):
        h = _hall()
        set_base_colors(h, _image(), CANVAS)
        later = _image()
        later[100:180, 100:180] = (0, 0, 255)
        occupied = evaluate_occupancy(h, later, ColorShiftStrategy(40.0), CANVAS)
        self.assertEqual(occupied, 1)
        self.assertEqual([s.occupied for s in h.rows[0].seats], [False, True, False])

    def test_injected_strategy_sees_region_and_baseline(self):
        h = _hall()
        set_base_colors(h, _image(), CANVAS)
        calls = []

        def strategy(region, base_color):
            calls.append((region.shape, base_color))
            return True

        evaluate_occupancy(h, _image(), strategy, CANVAS)
        self.assertEqual(calls, [((80, 80, 3), "#282828"), ((80, 80, 3), "#282828")])
        self.assertFalse(h.rows[0].seats[2].occupied)

    def test_random_strategy_is_seedable(self):
        a = RandomStrategy(seed=7)
        b = RandomStrategy(seed=7)
        self.assertEqual([a(None, "#000000") for _ in range(20)], [b(None, "#000000") for _ in range(20)])
        self.assertFalse(RandomStrategy(probability=0.0)(None, "#000000"))
        self.assertTrue(RandomStrategy(probability=1.0)(None, "#000000"))


if __name__ == "__main__":
    unittest.main()
