import unittest

from shinobu8.display import DISPLAY_HEIGHT, DISPLAY_WIDTH, Display


class TestDisplay(unittest.TestCase):

    def setUp(self):
        self.display = Display()

    def test_starts_blank(self):
        self.assertEqual(DISPLAY_WIDTH * DISPLAY_HEIGHT, len(self.display.pixels))
        self.assertTrue(self.display.is_blank())

    def test_flip_pixel_reports_collision(self):
        self.assertFalse(self.display.flip_pixel(3, 4))
        self.assertTrue(self.display.get_pixel(3, 4))
        self.assertTrue(self.display.flip_pixel(3, 4))
        self.assertFalse(self.display.get_pixel(3, 4))

    def test_flip_pixel_wraps(self):
        self.display.flip_pixel(DISPLAY_WIDTH + 1, DISPLAY_HEIGHT + 2)
        self.assertTrue(self.display.get_pixel(1, 2))

    def test_get_pixel_wraps(self):
        self.display.flip_pixel(0, 0)
        self.assertTrue(self.display.get_pixel(DISPLAY_WIDTH, 0))
        self.assertTrue(self.display.get_pixel(0, DISPLAY_HEIGHT))
        self.assertFalse(self.display.get_pixel(DISPLAY_WIDTH, 1))
        self.display.flip_pixel(DISPLAY_WIDTH - 1, DISPLAY_HEIGHT - 1)
        self.assertTrue(self.display.get_pixel(-1, -1))
        self.assertFalse(self.display.get_pixel(-1, 0))

    def test_draw_sprite_most_significant_bit_first(self):
        collision = self.display.draw_sprite(0, 0, [0x81])
        self.assertFalse(collision)
        self.assertTrue(self.display.get_pixel(0, 0))
        self.assertFalse(self.display.get_pixel(1, 0))
        self.assertTrue(self.display.get_pixel(7, 0))

    def test_draw_sprite_twice_is_undone(self):
        self.display.draw_sprite(10, 10, [0xF0, 0x90])
        self.assertTrue(self.display.draw_sprite(10, 10, [0xF0, 0x90]))
        self.assertTrue(self.display.is_blank())

    def test_clear(self):
        self.display.draw_sprite(0, 0, [0xFF, 0xFF])
        self.display.clear()
        self.assertTrue(self.display.is_blank())

    def test_str(self):
        self.display.flip_pixel(0, 0)
        rows = str(self.display).split('\n')
        self.assertEqual(DISPLAY_HEIGHT, len(rows))
        self.assertEqual('#' + '.' * (DISPLAY_WIDTH - 1), rows[0])


if __name__ == '__main__':
    unittest.main()
