from pygame import display, HWSURFACE, DOUBLEBUF, Color, draw

from shinobu8.display import DISPLAY_HEIGHT, DISPLAY_WIDTH

SCREEN_NAME = 'shinobu8 - CHIP-8'

# The depth of the screen is the number of bits used to represent the color
# of a pixel.
SCREEN_DEPTH = 8

# The colors of the pixels to draw. The Chip 8 supports two colors: off and
# on. The format of the colors is in RGBA format.
PIXEL_COLORS = {
    False: Color(0, 0, 0, 255),
    True: Color(250, 250, 250, 255)
}


class Screen(object):
    """
    A pygame window that shows the Chip 8 framebuffer. The screen never
    changes the framebuffer, it only paints it.
    """
    def __init__(self, ratio, screen_height=DISPLAY_HEIGHT, screen_width=DISPLAY_WIDTH):
        """
        Initializes the main screen. The scaling ratio is used to modify
        the size of the main screen, since the original resolution of the
        Chip 8 was 64 x 32, which is quite small.

        :param ratio: the scaling factor to apply to the screen
        :param screen_height: the height of the screen
        :param screen_width: the width of the screen
        """
        self.screen_height = screen_height
        self.screen_width = screen_width
        self.scaling_ratio = ratio
        self.screen_surface = None

    def init_display(self):
        """
        Attempts to initialize a screen with the specified height and width.
        The screen will by default be of depth SCREEN_DEPTH, and will be
        double-buffered in hardware (if possible).
        """
        display.init()
        self.screen_surface = display.set_mode(
            ((self.screen_width * self.scaling_ratio),
             (self.screen_height * self.scaling_ratio)),
            HWSURFACE | DOUBLEBUF,
            SCREEN_DEPTH)
        display.set_caption(SCREEN_NAME)
        self.clear_screen()
        display.flip()

    def draw_screen_pixel(self, x_axis_position, y_axis_position, pixel_on):
        """
        Turn a pixel on or off at the specified location on the screen. Note
        that the pixel will not automatically be drawn on the screen, you
        must call update_screen() to flip the drawing buffer to the display.
        The coordinate system starts with (0, 0) being in the top left of the
        screen.
        """
        x_axis_base_position = x_axis_position * self.scaling_ratio
        y_axis_base_position = y_axis_position * self.scaling_ratio
        draw.rect(self.screen_surface,
                  PIXEL_COLORS[bool(pixel_on)],
                  (x_axis_base_position, y_axis_base_position, self.scaling_ratio, self.scaling_ratio))

    def render(self, framebuffer):
        """
        Paint every pixel of the framebuffer and flip it to the display.

        :param framebuffer: a shinobu8.display.Display
        """
        for y_axis_position in range(framebuffer.height):
            for x_axis_position in range(framebuffer.width):
                self.draw_screen_pixel(
                    x_axis_position, y_axis_position,
                    framebuffer.get_pixel(x_axis_position, y_axis_position))
        self.update_screen()

    def clear_screen(self):
        """
        Turns off all the pixels on the screen.
        """
        self.screen_surface.fill(PIXEL_COLORS[False])

    @staticmethod
    def update_screen():
        """
        Updates the display by swapping the back buffer and screen buffer.
        According to the pygame documentation, the flip should wait for a
        vertical retrace when both HWSURFACE and DOUBLEBUF are set on the
        surface.
        """
        display.flip()

    @staticmethod
    def destroy():
        display.quit()
