# The Chip 8 screen is 64 x 32 monochrome pixels
DISPLAY_WIDTH = 64
DISPLAY_HEIGHT = 32


class Display(object):
    """
    The framebuffer of the Chip 8. Pixels are stored row by row as booleans,
    so the pixel at (x, y) lives at index y * width + x. Only the clear and
    draw instructions change it; renderers read it between steps.
    """
    def __init__(self, width=DISPLAY_WIDTH, height=DISPLAY_HEIGHT):
        self.width = width
        self.height = height
        self.pixels = [False] * (width * height)

    def clear(self):
        """
        Turn off every pixel.
        """
        for index in range(len(self.pixels)):
            self.pixels[index] = False

    def get_pixel(self, x_pos, y_pos):
        """
        Coordinates wrap around the edges of the screen, as in flip_pixel().
        """
        return self.pixels[(y_pos % self.height) * self.width + (x_pos % self.width)]

    def flip_pixel(self, x_pos, y_pos):
        """
        XOR a lit sprite pixel onto the screen. Coordinates wrap around the
        edges of the screen.

        :param x_pos: the x coordinate of the pixel
        :param y_pos: the y coordinate of the pixel
        :return: True if the pixel was on before the flip (a collision)
        """
        index = (y_pos % self.height) * self.width + (x_pos % self.width)
        collision = self.pixels[index]
        self.pixels[index] = not collision
        return collision

    def draw_sprite(self, x_pos, y_pos, sprite_rows):
        """
        Draw a sprite 8 pixels wide, one byte per row, with the most
        significant bit as the leftmost pixel. For example, these rows
        draw an 'E':

                       bit 7 6 5 4 3 2 1 0

           byte 0          1 1 1 1 0 0 0 0
           byte 1          1 0 0 0 0 0 0 0
           byte 2          1 1 1 1 0 0 0 0
           byte 3          1 0 0 0 0 0 0 0
           byte 4          1 1 1 1 0 0 0 0

        :param x_pos: the x coordinate of the top left corner
        :param y_pos: the y coordinate of the top left corner
        :param sprite_rows: an iterable of row bytes
        :return: True if any lit pixel was turned off
        """
        collision = False
        for y_index, row_byte in enumerate(sprite_rows):
            for x_index in range(8):
                if row_byte & (0x80 >> x_index):
                    if self.flip_pixel(x_pos + x_index, y_pos + y_index):
                        collision = True
        return collision

    def is_blank(self):
        return not any(self.pixels)

    def __str__(self):
        rows = []
        for y_pos in range(self.height):
            row = self.pixels[y_pos * self.width:(y_pos + 1) * self.width]
            rows.append(''.join('#' if pixel else '.' for pixel in row))
        return '\n'.join(rows)
