import unittest

import numpy as np

from hall_annotator import session as sm
from hall_annotator.canvas import paint
from hall_annotator.geometry import Point, SeatRect, Size
from hall_annotator.grid import HallView
from hall_annotator.render import (
    EMPTY_FILL,
    LIVE_FILL,
    OCCUPIED_FILL,
    PLACEHOLDER_PROMPT,
    Clear,
    DrawImage,
    FillRect,
    StrokeRect,
    Text,
    render_frame,
    render_summary,
)


def _hall():
    h = HallView()
    h.add_row("A", 2)
    h.commit_seat_rectangle("A", 0, Point(10, 10), Point(50, 50))
    h.commit_seat_rectangle("A", 1, Point(60, 10), Point(100, 50))
    h.rows[0].seats[1].occupied = True
    return h


class TestRenderFrame(unittest.TestCase):
    def test_placeholder_without_image(self):
        cmds = render_frame(None, sm.IDLE)
        self.assertEqual(cmds[0], Clear(Size(800, 600)))
        self.assertIsInstance(cmds[1], FillRect)
        self.assertEqual(cmds[2].text, PLACEHOLDER_PROMPT)
        self.assertEqual(cmds[2].at, Point(400, 300))

    def test_image_background(self):
        img = np.zeros((10, 10, 3), dtype=np.uint8)
        cmds = render_frame(HallView(), sm.IDLE, img)
        self.assertEqual(cmds[1], DrawImage(Size(800, 600)))
        self.assertIs(cmds[1].source, img)

    def test_seats_colored_by_occupancy(self):
        cmds = render_frame(_hall(), sm.IDLE)
        fills = [c for c in cmds if isinstance(c, FillRect)][1:]
        self.assertEqual([f.rgba for f in fills], [EMPTY_FILL, OCCUPIED_FILL])
        labels = [c for c in cmds if isinstance(c, Text)][1:]
        self.assertEqual([(t.text, t.at) for t in labels], [("A1", Point(30, 30)), ("A2", Point(80, 30))])

    def test_unmapped_seats_not_drawn(self):
        h = HallView()
        h.add_row("A", 3)
        cmds = render_frame(h, sm.IDLE)
        self.assertFalse(any(isinstance(c, StrokeRect) for c in cmds))

    def test_live_rect_drawn_last(self):
        h = _hall()
        s, _ = sm.start_for_seat(sm.IDLE, h, "A", 2)
        s, _ = sm.pointer_down(s, Point(200, 200))
        s, _ = sm.pointer_move(s, Point(150, 120))
        cmds = render_frame(h, s)
        self.assertEqual(cmds[-3], FillRect(SeatRect(Point(150, 120), Point(200, 200)), LIVE_FILL))
        self.assertEqual(cmds[-1].text, "A2")

    def test_armed_session_draws_no_live_rect(self):
        h = _hall()
        s, _ = sm.start_for_row(sm.IDLE, h, "A")
        self.assertEqual(render_frame(h, s), render_frame(h, sm.IDLE))

    def test_idempotent(self):
        h = _hall()
        img = np.zeros((4, 4, 3), dtype=np.uint8)
        self.assertEqual(render_frame(h, sm.IDLE, img), render_frame(h, sm.IDLE, img))

    def test_empty_surface_is_noop(self):
        self.assertEqual(render_frame(_hall(), sm.IDLE, size=Size(0, 600)), [])
        self.assertEqual(render_frame(_hall(), sm.IDLE, size=None), [])

    def test_render_does_not_mutate(self):
        h = _hall()
        before = [(s.rect, s.occupied) for _, s in h.iter_seats()]
        render_frame(h, sm.IDLE)
        self.assertEqual([(s.rect, s.occupied) for _, s in h.iter_seats()], before)


class TestPaint(unittest.TestCase):
    def test_paint_fills_seat_region(self):
        size = Size(120, 80)
        out = paint(render_frame(_hall(), sm.IDLE, size=size), size)
        self.assertEqual(out.shape, (80, 120, 3))
        corner = out[2, 2].tolist()
        self.assertEqual(corner, [246, 244, 243])  # placeholder, BGR
        seat = out[15, 15].tolist()
        self.assertNotEqual(seat, corner)
        self.assertGreater(seat[1], seat[2])  # green dominates on an empty seat

    def test_paint_image_scaled(self):
        img = np.full((10, 20, 3), 200, dtype=np.uint8)
        size = Size(40, 30)
        out = paint(render_frame(HallView(), sm.IDLE, img, size=size), size)
        self.assertTrue((out == 200).all())

    def test_paint_empty_size(self):
        out = paint([], Size(0, 0))
        self.assertEqual(out.size, 0)


class TestSummary(unittest.TestCase):
    def test_summary(self):
        text = render_summary(_hall())
        lines = text.splitlines()
        self.assertEqual(len(lines), 2)
        self.assertIn(" o ", lines[1])
        self.assertIn(" X ", lines[1])
        self.assertTrue(lines[1].endswith("2/2 mapped, 1 occupied"))

    def test_summary_no_rows(self):
        self.assertEqual(render_summary(HallView()), "(no rows)")


if __name__ == "__main__":
    unittest.main()
