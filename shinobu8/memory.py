from shinobu8.exception import MemoryAccessException

# The total amount of memory to allocate for the emulator
MAX_MEMORY = 4096

# Where programs are loaded, and where the program counter originally points
PROGRAM_COUNTER_START = 0x200

# Where the built-in font is loaded
FONT_START = 0x000

# Each font sprite is 5 bytes tall
FONT_SPRITE_SIZE = 5

# The built-in hexadecimal font. Each digit is 4 pixels wide and 5 pixels
# tall, stored as one byte per row with the pixels in the high nibble.
FONT_SET = bytes([
    0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
    0x20, 0x60, 0x20, 0x20, 0x70,  # 1
    0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
    0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
    0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
    0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
    0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
    0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
    0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
    0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
    0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
    0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
    0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
    0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
    0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
    0xF0, 0x80, 0xF0, 0x80, 0x80,  # F
])


class Memory(object):
    """
    The flat 4K address space of the Chip 8. The font lives at the bottom of
    memory and programs are loaded at 0x200:

        0x000 - 0x04F   built-in hexadecimal font
        0x050 - 0x1FF   unused (reserved for the original interpreter)
        0x200 - 0xFFF   program and data
    """
    def __init__(self, size=MAX_MEMORY):
        self.memory_size = size
        self.memory_bytes = bytearray(size)

    def __len__(self):
        return self.memory_size

    def load(self, rom_data):
        """
        Copy the program bytes into memory starting at PROGRAM_COUNTER_START,
        then (re)install the font at FONT_START.

        :param rom_data: the raw bytes of the program
        """
        rom_end = PROGRAM_COUNTER_START + len(rom_data)
        if rom_end > self.memory_size:
            raise MemoryAccessException(rom_end - 1, "Program too large")
        self.memory_bytes[PROGRAM_COUNTER_START:rom_end] = rom_data
        self.memory_bytes[FONT_START:FONT_START + len(FONT_SET)] = FONT_SET

    def check_address(self, address):
        if not 0 <= address < self.memory_size:
            raise MemoryAccessException(address)

    def read(self, address):
        self.check_address(address)
        return self.memory_bytes[address]

    def write(self, address, value):
        self.check_address(address)
        self.memory_bytes[address] = value & 0xFF
