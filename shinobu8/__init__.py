from shinobu8.cpu import CPU
from shinobu8.exception import Chip8Exception, UnknownOpCodeException

__version__ = "0.1.0"
