class Chip8Exception(Exception):
    """
    Base class for every error raised while running a Chip 8 program.
    """


class UnknownOpCodeException(Chip8Exception):
    """
    A class to raise unknown op code exceptions.
    """
    def __init__(self, op_code):
        Chip8Exception.__init__(self, "Unknown op-code: {:04X}".format(op_code))
        self.op_code = op_code


class MemoryAccessException(Chip8Exception, IndexError):
    """
    Raised when an address falls outside of the addressable memory.
    """
    def __init__(self, address, message="Memory access out of range"):
        Chip8Exception.__init__(self, "{}: {:X}".format(message, address))
        self.address = address


class MisalignedProgramCounterException(Chip8Exception):
    """
    Raised when an instruction is fetched from an odd address.
    """
    def __init__(self, address):
        Chip8Exception.__init__(self, "Program counter not aligned: {:04X}".format(address))
        self.address = address


class StackOverflowException(Chip8Exception):
    def __init__(self, address):
        Chip8Exception.__init__(self, "Stack overflow calling {:03X}".format(address))
        self.address = address


class StackUnderflowException(Chip8Exception):
    def __init__(self):
        Chip8Exception.__init__(self, "Return with an empty stack")


class InvalidKeyException(Chip8Exception):
    """
    Raised when a key outside of the 16 key pad is addressed.
    """
    def __init__(self, key):
        Chip8Exception.__init__(self, "Invalid key: {:X}".format(key))
        self.key = key
