import tempfile
import unittest
from pathlib import Path

import cv2
import numpy as np

from hall_annotator.catalog import SAMPLE_CATALOG
from hall_annotator.controller import AnnotationController
from hall_annotator.geometry import CanvasBox, Point
from hall_annotator.session import SessionState


class TestAnnotationController(unittest.TestCase):
    def setUp(self):
        self.notices = []
        self.updates = []
        self.frames = []
        self.c = AnnotationController(
            notifier=lambda level, msg: self.notices.append((level, msg)),
            on_seat_coordinates_update=lambda tl, br: self.updates.append((tl, br)),
        )
        self.c.subscribe(self.frames.append)
        self.c.select_camera(SAMPLE_CATALOG.camera("camera1"))

    def _drag(self, a, b, box=None):
        self.c.pointer_down(a, box)
        self.c.pointer_move(b, box)
        self.c.pointer_up(b, box)

    def test_end_to_end_row(self):
        self.c.add_row("A", 2)
        self.assertTrue(self.c.start_for_row("A"))

        self._drag(Point(10, 10), Point(50, 50))
        seat1 = self.c.hall.find_row("A").seats[0]
        self.assertEqual((seat1.top_left, seat1.bottom_right), (Point(10, 10), Point(50, 50)))
        self.assertEqual(self.c.session.state, SessionState.armed)
        self.assertEqual(self.c.session.target_seat_number, 2)

        self._drag(Point(60, 10), Point(100, 50))
        seat2 = self.c.hall.find_row("A").seats[1]
        self.assertEqual((seat2.top_left, seat2.bottom_right), (Point(60, 10), Point(100, 50)))
        self.assertEqual(self.c.session.state, SessionState.idle)
        self.assertEqual(
            self.updates,
            [(Point(10, 10), Point(50, 50)), (Point(60, 10), Point(100, 50))],
        )
        self.assertIn(("success", "All seats in row A have been mapped!"), self.notices)

    def test_rejected_drag_fires_nothing(self):
        self.c.add_row("A", 2)
        self.c.start_for_row("A")
        self._drag(Point(10, 10), Point(15, 80))
        self.assertEqual(self.updates, [])
        self.assertEqual(self.c.session.state, SessionState.armed)
        self.assertEqual(self.c.session.target_seat_index, 0)

    def test_pointer_through_canvas_box(self):
        self.c.add_row("A", 1)
        self.c.start_for_row("A")
        box = CanvasBox(left=100, top=200, width=800, height=600)
        self._drag(Point(110, 210), Point(150, 250), box)
        self.assertEqual(self.updates, [(Point(10, 10), Point(50, 50))])

    def test_one_redraw_per_transition(self):
        self.c.add_row("A", 1)
        self.c.start_for_row("A")
        self.frames.clear()
        self.c.pointer_down(Point(0, 0))
        self.c.pointer_move(Point(20, 20))
        self.c.pointer_move(Point(30, 30))
        self.c.pointer_up(Point(30, 30))
        self.assertEqual(len(self.frames), 4)

    def test_ignored_pointer_does_not_redraw(self):
        self.frames.clear()
        self.c.pointer_down(Point(0, 0))
        self.c.pointer_up(Point(40, 40))
        self.assertEqual(self.frames, [])

    def test_stop_mid_capture_keeps_commits(self):
        self.c.add_row("A", 2)
        self.c.start_for_row("A")
        self._drag(Point(10, 10), Point(50, 50))
        self.c.pointer_down(Point(60, 10))
        self.c.pointer_move(Point(100, 50))
        self.c.stop()
        self.assertEqual(self.c.session.state, SessionState.idle)
        seats = self.c.hall.find_row("A").seats
        self.assertTrue(seats[0].is_mapped)
        self.assertFalse(seats[1].is_mapped)
        self.assertIsNone(self.c.session.live_rect())

    def test_invalid_row_input_warns(self):
        self.assertIsNone(self.c.add_row("  ", 3))
        self.assertIsNone(self.c.add_row("A", 0))
        self.assertEqual(self.c.hall.rows, [])
        self.assertEqual([lvl for lvl, _ in self.notices[-2:]], ["warning", "warning"])

    def test_start_for_row_strips_name(self):
        self.c.add_row("A", 1)
        self.assertTrue(self.c.start_for_row(" A "))
        self.assertEqual(self.c.session.target_row, "A")

    def test_start_unknown_row_warns(self):
        self.assertFalse(self.c.start_for_row("Z"))
        self.assertEqual(self.notices[-1][0], "warning")
        self.assertFalse(self.c.session.active)

    def test_select_camera_replaces_hall(self):
        self.c.add_row("A", 2)
        self.c.start_for_row("A")
        hall = self.c.select_camera(SAMPLE_CATALOG.camera("camera2"))
        self.assertEqual(hall.camera_id, "camera2")
        self.assertEqual(hall.rows, [])
        self.assertFalse(self.c.session.active)

    def test_no_camera_selected(self):
        c = AnnotationController(notifier=lambda level, msg: self.notices.append((level, msg)))
        self.assertIsNone(c.add_row("A", 2))
        self.assertEqual(self.notices[-1], ("warning", "Select a camera first"))
        c.pointer_up(Point(1, 1))
        self.assertEqual(c.render()[-1].text, "Upload hall image to begin")

    def test_image_swap_redraws_once_and_keeps_seats(self):
        self.c.add_row("A", 1)
        self.c.start_for_row("A")
        self._drag(Point(0, 0), Point(40, 40))
        self.frames.clear()
        self.c.set_background_image(np.zeros((60, 80, 3), dtype=np.uint8))
        self.assertEqual(len(self.frames), 1)
        self.assertTrue(self.c.hall.rows[0].seats[0].is_mapped)

    def test_load_background_from_file_redraws_once(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "hall.png"
            cv2.imwrite(str(path), np.full((60, 80, 3), 90, dtype=np.uint8))
            self.frames.clear()
            self.assertTrue(self.c.load_background(path))
        self.assertEqual(len(self.frames), 1)
        self.assertEqual(self.c.hall.background_image.shape, (60, 80, 3))
        self.assertEqual(self.notices[-1], ("success", "Hall image uploaded successfully"))

    def test_load_background_failure(self):
        self.frames.clear()
        self.assertFalse(self.c.load_background("/nonexistent/hall.png"))
        self.assertEqual(self.notices[-1][0], "error")
        self.assertEqual(self.frames, [])
        self.assertIsNone(self.c.hall.background_image)

    def test_occupancy_preconditions(self):
        self.c.add_row("A", 1)
        self.assertEqual(self.c.save_base_colors(), 0)
        self.assertEqual(self.notices[-1][0], "warning")
        self.assertEqual(self.c.evaluate_occupancy(), 0)
        self.assertEqual(self.notices[-1][0], "warning")

    def test_base_colors_need_a_mapped_seat(self):
        self.c.add_row("A", 1)
        self.c.set_background_image(np.zeros((60, 80, 3), dtype=np.uint8))
        self.assertEqual(self.c.save_base_colors(), 0)
        self.assertEqual(self.notices[-1], ("warning", "Please map at least one seat before saving base colors"))

    def test_occupancy_flow(self):
        self.c.add_row("A", 2)
        self.c.start_for_row("A")
        self._drag(Point(0, 0), Point(100, 100))
        self._drag(Point(200, 0), Point(300, 100))
        self.c.set_background_image(np.full((600, 800, 3), 30, dtype=np.uint8))
        self.assertEqual(self.c.save_base_colors(), 2)

        later = np.full((600, 800, 3), 30, dtype=np.uint8)
        later[0:100, 200:300] = (0, 0, 250)
        self.c.set_background_image(later)
        self.frames.clear()
        self.assertEqual(self.c.evaluate_occupancy(), 1)
        self.assertEqual(len(self.frames), 1)
        stats = self.c.stats()
        self.assertEqual((stats.mapped, stats.occupied, stats.with_base_color), (2, 1, 2))


if __name__ == "__main__":
    unittest.main()
