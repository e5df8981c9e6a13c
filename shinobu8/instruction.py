# Masks used to pull the fields out of an instruction word:
#
#    Bits:  15-12     11-8      7-4       3-0
#             a         b         c         d
#                    |-------- nnn ---------|
#                              |--- kk -----|
NIBBLE_A = 0xF000
NIBBLE_B = 0x0F00
NIBBLE_C = 0x00F0
NIBBLE_D = 0x000F
ADDRESS_MASK = 0x0FFF
BYTE_MASK = 0x00FF


class Instruction(object):
    """
    A single 16-bit Chip 8 instruction, stored most significant byte first
    in memory. Decoding is side-effect free.
    """
    def __init__(self, operand):
        if not 0 <= operand <= 0xFFFF:
            raise ValueError("Instruction out of range: {}".format(operand))
        self.operand = operand

    @classmethod
    def encode(cls, a, b, c, d):
        """
        Build an instruction from its four nibbles, most significant first.
        """
        for nibble in (a, b, c, d):
            if not 0 <= nibble <= 0xF:
                raise ValueError("Nibble out of range: {}".format(nibble))
        return cls((a << 12) | (b << 8) | (c << 4) | d)

    def decode(self):
        """
        Split the instruction into its four nibbles.

        :return: a tuple (a, b, c, d) from most to least significant
        """
        return ((self.operand & NIBBLE_A) >> 12,
                (self.operand & NIBBLE_B) >> 8,
                (self.operand & NIBBLE_C) >> 4,
                self.operand & NIBBLE_D)

    @property
    def nnn(self):
        return self.operand & ADDRESS_MASK

    @property
    def kk(self):
        return self.operand & BYTE_MASK

    def __eq__(self, other):
        if isinstance(other, Instruction):
            return self.operand == other.operand
        if isinstance(other, int):
            return self.operand == other
        return NotImplemented

    def __hash__(self):
        return hash(self.operand)

    def __repr__(self):
        return '{:04X}'.format(self.operand)
