import argparse
import logging
import os
import sys

os.environ["PYGAME_HIDE_SUPPORT_PROMPT"] = "1"
import pygame

from shinobu8.cpu import CPU
from shinobu8.exception import Chip8Exception
from shinobu8.screen import Screen

# A simple timer event used for the delay and sound timers and screen refresh
TIMER = pygame.USEREVENT + 1
# Delay timer decrement interval (in ms), roughly 60 Hz
DELAY_INTERVAL = 17
# The key that stops the emulator
QUIT_KEY = pygame.K_ESCAPE

# Sets which keys on the keyboard map to the Chip 8 keys:
#
#   1 2 3 4        1 2 3 C
#   q w e r   ->   4 5 6 D
#   a s d f        7 8 9 E
#   z x c v        A 0 B F
KEY_MAPPINGS = {
    pygame.K_1: 0x1,
    pygame.K_2: 0x2,
    pygame.K_3: 0x3,
    pygame.K_4: 0xC,
    pygame.K_q: 0x4,
    pygame.K_w: 0x5,
    pygame.K_e: 0x6,
    pygame.K_r: 0xD,
    pygame.K_a: 0x7,
    pygame.K_s: 0x8,
    pygame.K_d: 0x9,
    pygame.K_f: 0xE,
    pygame.K_z: 0xA,
    pygame.K_x: 0x0,
    pygame.K_c: 0xB,
    pygame.K_v: 0xF,
}

logger = logging.getLogger(__name__)


def process_event(cpu, screen, event):
    """
    Apply a single pygame event to the CPU. Timer ticks decrement the CPU
    timers and repaint the screen, key events press and release keys on the
    key pad, and closing the window or pressing QUIT_KEY asks the CPU to
    stop.

    :param cpu: the CPU being driven
    :param screen: the Screen showing the CPU framebuffer
    :param event: the pygame event
    """
    if event.type == TIMER:
        cpu.decrement_timers()
        screen.render(cpu.get_display())

    elif event.type == pygame.QUIT:
        cpu.quit()

    elif event.type == pygame.KEYDOWN:
        if event.key == QUIT_KEY:
            cpu.quit()
        elif event.key in KEY_MAPPINGS:
            cpu.key_down(KEY_MAPPINGS[event.key])

    elif event.type == pygame.KEYUP:
        if event.key in KEY_MAPPINGS:
            cpu.key_up(KEY_MAPPINGS[event.key])


def run_emulator(cpu, args):
    """
    Runs the main emulator loop with the specified arguments. One instruction
    is executed per iteration; pending events are handled between steps so
    the framebuffer and keys are only touched while the CPU is idle.

    :param cpu: a CPU with a program loaded
    :param args: the parsed command-line arguments
    """
    screen = Screen(ratio=args.scale)
    screen.init_display()
    pygame.time.set_timer(TIMER, DELAY_INTERVAL)

    try:
        while not cpu.is_quitting():
            pygame.time.wait(args.op_delay)
            cpu.step()

            for event in pygame.event.get():
                process_event(cpu, screen, event)
    finally:
        pygame.time.set_timer(TIMER, 0)
        screen.destroy()

    logger.info("Stopped after %d steps", cpu.get_steps())


def parse_arguments(argv=None):
    parser = argparse.ArgumentParser(
        description="Starts a simple Chip 8 emulator. Press Escape to quit.")
    parser.add_argument(
        "rom", help="the ROM file to load on startup")
    parser.add_argument(
        "-s", help="the scale factor to apply to the display "
                   "(default is 10)", type=int, default=10, dest="scale")
    parser.add_argument(
        "-d", help="sets the CPU operation to take at least "
                   "the specified number of milliseconds to execute (default is 1)",
        type=int, default=1, dest="op_delay")
    parser.add_argument(
        "-v", help="enable verbose debug logging",
        action="store_true", dest="verbose")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_arguments(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    cpu = CPU()
    try:
        with open(args.rom, 'rb') as rom_file:
            cpu.load(rom_file.read())
    except (OSError, Chip8Exception) as error:
        logger.error("Unable to load %s: %s", args.rom, error)
        return 1

    logger.info("Running %s", args.rom)
    try:
        run_emulator(cpu, args)
    except Chip8Exception as error:
        logger.error("Emulation halted: %s\n%s", error, cpu)
        return 1
    finally:
        pygame.quit()
    return 0


if __name__ == "__main__":
    sys.exit(main())
