import unittest

from shinobu8.instruction import Instruction


class TestInstruction(unittest.TestCase):

    def test_decode_nibbles(self):
        self.assertEqual((0xD, 0x1, 0x2, 0x5), Instruction(0xD125).decode())
        self.assertEqual((0x0, 0x0, 0xE, 0xE), Instruction(0x00EE).decode())

    def test_address_and_immediate(self):
        instruction = Instruction(0xA2F0)
        self.assertEqual(0x2F0, instruction.nnn)
        self.assertEqual(0xF0, instruction.kk)

    def test_decode_has_no_side_effects(self):
        instruction = Instruction(0x8AB4)
        self.assertEqual(instruction.decode(), instruction.decode())
        self.assertEqual(0x8AB4, instruction.operand)

    def test_encode_decode(self):
        for nibbles in [(0, 0, 0, 0), (0xF, 0xF, 0xF, 0xF), (8, 3, 0xC, 0xE), (1, 2, 3, 4)]:
            self.assertEqual(nibbles, Instruction.encode(*nibbles).decode())

    def test_encode_rejects_wide_nibble(self):
        with self.assertRaises(ValueError):
            Instruction.encode(0x10, 0, 0, 0)

    def test_rejects_out_of_range_word(self):
        with self.assertRaises(ValueError):
            Instruction(0x10000)
        with self.assertRaises(ValueError):
            Instruction(-1)

    def test_equality_and_repr(self):
        self.assertEqual(Instruction(0x00E0), 0x00E0)
        self.assertEqual(Instruction(0x1234), Instruction(0x1234))
        self.assertEqual('00E0', repr(Instruction(0x00E0)))


if __name__ == '__main__':
    unittest.main()
