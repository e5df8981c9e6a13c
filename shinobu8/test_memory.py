import unittest

from shinobu8.exception import MemoryAccessException
from shinobu8.memory import FONT_SET, MAX_MEMORY, PROGRAM_COUNTER_START, Memory


class TestMemory(unittest.TestCase):

    def setUp(self):
        self.memory = Memory()

    def test_memory_starts_zeroed(self):
        self.assertEqual(MAX_MEMORY, len(self.memory))
        self.assertFalse(any(self.memory.memory_bytes))

    def test_load_places_program_and_font(self):
        rom = bytes([0x12, 0x34, 0xAB, 0xCD])
        self.memory.load(rom)
        self.assertEqual(FONT_SET, bytes(self.memory.memory_bytes[:0x50]))
        self.assertEqual(rom, bytes(self.memory.memory_bytes[0x200:0x204]))
        self.assertEqual(0, self.memory.read(0x204))

    def test_load_reinstalls_font_over_modified_memory(self):
        for address in range(0x50):
            self.memory.write(address, 0xFF)
        self.memory.load(b'\x00\xE0')
        self.assertEqual(FONT_SET, bytes(self.memory.memory_bytes[:0x50]))

    def test_load_largest_program(self):
        rom = bytes([0xAA]) * (MAX_MEMORY - PROGRAM_COUNTER_START)
        self.memory.load(rom)
        self.assertEqual(0xAA, self.memory.read(MAX_MEMORY - 1))

    def test_load_program_too_large(self):
        rom = bytes(MAX_MEMORY - PROGRAM_COUNTER_START + 1)
        with self.assertRaises(MemoryAccessException):
            self.memory.load(rom)

    def test_read_write(self):
        self.memory.write(0x300, 0x42)
        self.assertEqual(0x42, self.memory.read(0x300))

    def test_write_masks_to_byte(self):
        self.memory.write(0x300, 0x1FF)
        self.assertEqual(0xFF, self.memory.read(0x300))

    def test_out_of_range_access(self):
        with self.assertRaises(MemoryAccessException):
            self.memory.read(MAX_MEMORY)
        with self.assertRaises(IndexError):
            self.memory.write(0x1000, 1)
        with self.assertRaises(IndexError):
            self.memory.read(-1)


if __name__ == '__main__':
    unittest.main()
