import os
import tempfile
import unittest
from unittest import mock

import pygame

from shinobu8.cpu import CPU
from shinobu8.main import QUIT_KEY, TIMER, main, parse_arguments, process_event


class TestProcessEvent(unittest.TestCase):

    def setUp(self):
        self.cpu = CPU()
        self.screen = mock.MagicMock()

    def test_key_press_and_release(self):
        process_event(self.cpu, self.screen, pygame.event.Event(pygame.KEYDOWN, key=pygame.K_q))
        self.assertTrue(self.cpu.keys[0x4])
        process_event(self.cpu, self.screen, pygame.event.Event(pygame.KEYUP, key=pygame.K_q))
        self.assertFalse(self.cpu.keys[0x4])

    def test_unmapped_key_is_ignored(self):
        process_event(self.cpu, self.screen, pygame.event.Event(pygame.KEYDOWN, key=pygame.K_p))
        self.assertFalse(any(self.cpu.keys))
        self.assertFalse(self.cpu.is_quitting())

    def test_timer_tick_decrements_and_renders(self):
        self.cpu.timers['delay'] = 3
        process_event(self.cpu, self.screen, pygame.event.Event(TIMER))
        self.assertEqual(2, self.cpu.timers['delay'])
        self.screen.render.assert_called_once_with(self.cpu.get_display())

    def test_quit_events(self):
        process_event(self.cpu, self.screen, pygame.event.Event(pygame.QUIT))
        self.assertTrue(self.cpu.is_quitting())

        cpu = CPU()
        process_event(cpu, self.screen, pygame.event.Event(pygame.KEYDOWN, key=QUIT_KEY))
        self.assertTrue(cpu.is_quitting())


class TestMain(unittest.TestCase):

    def test_parse_arguments_defaults(self):
        args = parse_arguments(['game.ch8'])
        self.assertEqual('game.ch8', args.rom)
        self.assertEqual(10, args.scale)
        self.assertEqual(1, args.op_delay)
        self.assertFalse(args.verbose)

    def test_parse_arguments_options(self):
        args = parse_arguments(['game.ch8', '-s', '4', '-d', '0', '-v'])
        self.assertEqual(4, args.scale)
        self.assertEqual(0, args.op_delay)
        self.assertTrue(args.verbose)

    def test_missing_rom(self):
        missing = os.path.join(tempfile.gettempdir(), 'shinobu8-missing.ch8')
        self.assertEqual(1, main([missing]))

    @mock.patch('shinobu8.main.run_emulator')
    def test_main_loads_and_runs(self, run_mock):
        with tempfile.NamedTemporaryFile(suffix='.ch8', delete=False) as rom_file:
            rom_file.write(b'\x00\xE0')
        try:
            self.assertEqual(0, main([rom_file.name]))
        finally:
            os.remove(rom_file.name)
        cpu = run_mock.call_args[0][0]
        self.assertEqual(0xE0, cpu.memory.read(0x201))


if __name__ == '__main__':
    unittest.main()
