import logging
import threading
from random import randint

from shinobu8.display import Display
from shinobu8.exception import (
    InvalidKeyException,
    MisalignedProgramCounterException,
    StackOverflowException,
    StackUnderflowException,
    UnknownOpCodeException,
)
from shinobu8.instruction import Instruction
from shinobu8.memory import FONT_SPRITE_SIZE, FONT_START, PROGRAM_COUNTER_START, Memory

# The total number of registers in the Chip 8 CPU
NUM_REGISTERS = 0x10

# VF doubles as the carry, borrow and collision flag
FLAG_REGISTER = 0xF

# The number of return addresses the stack can hold
STACK_SIZE = 0x10

# The number of keys on the Chip 8 key pad
NUM_KEYS = 0x10

logger = logging.getLogger(__name__)

# C L A S S E S ###############################################################


class CPU(object):
    """
    A class to emulate a Chip 8 CPU. There are several good resources out on
    the web that describe the internals of the Chip 8 CPU. For example:

        http://devernay.free.fr/hacks/chip8/C8TECH10.HTM
        http://michael.toren.net/mirrors/chip8/chip8def.htm

    To summarize these sources, the Chip 8 has:

        * 16 x 8-bit general purpose registers (V0 - VF**)
        * 1 x 16-bit index register (I)
        * 1 x 8-bit stack pointer (SP) into a 16 entry call stack
        * 1 x 16-bit program counter (PC)
        * 1 x 8-bit delay timer (DT)
        * 1 x 8-bit sound timer (ST)
        * 16 keys, 0 - F
        * a 64 x 32 monochrome display

    ** VF is a special register - it is used to store the overflow bit

    The CPU owns all of its state. Only the step counter and the quit flag
    may be touched from another thread; everything else must be read or
    changed between calls to step().
    """
    def __init__(self):
        # There are two timer registers, one for sound and one that is general
        # purpose known as the delay timer. The timers are loaded with a value
        # and then decremented 60 times per second by whoever drives the CPU.
        self.timers = {
            'delay': 0,
            'sound': 0,
        }

        # Defines the general purpose, index, stack pointer and program
        # counter registers.
        self.registers = {
            'v': [],
            'index': 0,
            'sp': 0,
            'pc': 0,
        }

        # The operation_lookup table is executed according to the most
        # significant nibble of the operand (e.g. operand 8nnn would call
        # self.execute_logical_instruction)
        self.operation_lookup = {
            0x0: self.clear_return,                  # 00E0 - CLS, 00EE - RTS
            0x1: self.jump_to_address,               # 1nnn - JUMP nnn
            0x2: self.jump_to_subroutine,            # 2nnn - CALL nnn
            0x3: self.skip_if_reg_equal_val,         # 3snn - SKE  Vs, nn
            0x4: self.skip_if_reg_not_equal_val,     # 4snn - SKNE Vs, nn
            0x5: self.skip_if_reg_equal_reg,         # 5st0 - SKE  Vs, Vt
            0x6: self.move_value_to_reg,             # 6snn - LOAD Vs, nn
            0x7: self.add_value_to_reg,              # 7snn - ADD  Vs, nn
            0x8: self.execute_logical_instruction,   # see subfunctions below
            0x9: self.skip_if_reg_not_equal_reg,     # 9st0 - SKNE Vs, Vt
            0xA: self.load_index_reg_with_value,     # Annn - LOAD I, nnn
            0xB: self.jump_to_v0_plus_value,         # Bnnn - JUMP [V0] + nnn
            0xC: self.generate_random_number,        # Ctnn - RAND Vt, nn
            0xD: self.draw_sprite,                   # Dstn - DRAW Vs, Vt, n
            0xE: self.keyboard_routines,             # see subfunctions below
            0xF: self.misc_routines,                 # see subfunctions below
        }

        # This set of operations is invoked when the operand loaded into the
        # CPU starts with 8 (e.g. operand 8nn0 would call
        # self.move_reg_into_reg)
        self.logical_operation_lookup = {
            0x0: self.move_reg_into_reg,             # 8st0 - LOAD Vs, Vt
            0x1: self.logical_or,                    # 8st1 - OR   Vs, Vt
            0x2: self.logical_and,                   # 8st2 - AND  Vs, Vt
            0x3: self.exclusive_or,                  # 8st3 - XOR  Vs, Vt
            0x4: self.add_reg_to_reg,                # 8st4 - ADD  Vs, Vt
            0x5: self.subtract_reg_from_reg,         # 8st5 - SUB  Vs, Vt
            0x6: self.right_shift_reg,               # 8s06 - SHR  Vs
            0x7: self.subtract_reg_from_reg_reversed,  # 8st7 - SUBN Vs, Vt
            0xE: self.left_shift_reg,                # 8s0E - SHL  Vs
        }

        # This set of operations is invoked when the operand loaded into the
        # CPU starts with F (e.g. operand Fn07 would call
        # self.move_delay_timer_into_reg)
        self.misc_routine_lookup = {
            0x07: self.move_delay_timer_into_reg,    # Ft07 - LOAD Vt, DELAY
            0x0A: self.wait_for_keypress,            # Ft0A - KEYD Vt
            0x15: self.move_reg_into_delay_timer,    # Fs15 - LOAD DELAY, Vs
            0x18: self.move_reg_into_sound_timer,    # Fs18 - LOAD SOUND, Vs
            0x1E: self.add_reg_into_index,           # Fs1E - ADD  I, Vs
            0x29: self.load_index_with_reg_sprite,   # Fs29 - LOAD I, Vs
            0x33: self.store_bcd_in_memory,          # Fs33 - BCD
            0x55: self.store_regs_in_memory,         # Fs55 - STOR [I], Vs
            0x65: self.read_regs_from_memory,        # Fs65 - LOAD Vs, [I]
        }
        self.instruction = Instruction(0)
        self.memory = Memory()
        self.display = Display()
        self.stack = [0] * STACK_SIZE
        self.keys = [False] * NUM_KEYS

        # Shared with a controlling thread
        self.control_lock = threading.Lock()
        self.steps = 0
        self.quitting = False

        self.reset()

    def __str__(self):
        val = 'PC: {:4X}  OP: {!r}\n'.format(
            self.registers['pc'] - 2, self.instruction)
        for index in range(NUM_REGISTERS):
            val += 'V{:X}: {:2X}\n'.format(index, self.registers['v'][index])
        val += 'I: {:4X}\n'.format(self.registers['index'])
        val += 'SP: {:X}\n'.format(self.registers['sp'])
        val += 'DT: {:2X}  ST: {:2X}\n'.format(
            self.timers['delay'], self.timers['sound'])
        return val

    # D R I V E R #############################################################

    def step(self):
        """
        Fetch and execute exactly one instruction, then count the step.

        :return: the instruction executed
        """
        instruction = self.fetch()
        self.execute(instruction)
        with self.control_lock:
            self.steps += 1
        return instruction

    def run(self):
        """
        Execute instructions until quit() is called. The quit flag is checked
        once before every step, so at most one more instruction runs after
        the request. Any Chip8Exception stops the loop and propagates.
        """
        while not self.is_quitting():
            self.step()

    def quit(self):
        with self.control_lock:
            self.quitting = True
        logger.debug("Quit requested after %d steps", self.get_steps())

    def is_quitting(self):
        with self.control_lock:
            return self.quitting

    def get_steps(self):
        with self.control_lock:
            return self.steps

    def fetch(self):
        """
        Read the instruction pointed to by the program counter and advance
        the program counter by 2. Instructions are stored most significant
        byte first.

        :return: the Instruction read
        """
        pc = self.registers['pc']
        if pc % 2 != 0:
            raise MisalignedProgramCounterException(pc)
        operand = self.memory.read(pc) << 8
        operand |= self.memory.read(pc + 1)
        self.registers['pc'] = pc + 2
        return Instruction(operand)

    def execute(self, instruction):
        """
        Execute a single decoded instruction against the current state. The
        program counter must already point past the instruction.

        :param instruction: the Instruction to execute
        """
        self.instruction = instruction
        operation = instruction.decode()[0]
        self.operation_lookup[operation]()

    def unknown_op_code(self):
        raise UnknownOpCodeException(self.instruction.operand)

    # S U B - T A B L E S #####################################################

    def execute_logical_instruction(self):
        """
        Execute the logical instruction based upon the current operand.
        """
        operation = self.instruction.decode()[3]
        try:
            routine = self.logical_operation_lookup[operation]
        except KeyError:
            raise UnknownOpCodeException(self.instruction.operand)
        routine()

    def keyboard_routines(self):
        """
        Run the specified keyboard routine based upon the operand. These
        operations are:

            Es9E - SKPR Vs
            EsA1 - SKUP Vs

        0x9E will check to see if the key specified in the source register is
        pressed, and if it is, skips the next instruction. Operation 0xA1 will
        again check for the specified keypress in the source register, and
        if it is NOT pressed, will skip the next instruction. The register
        calculations are as follows:

           Bits:  15-12    11-8      7-4      3-0
                  unused   source  9 or A    E or 1
        """
        operation = self.instruction.kk
        if operation not in (0x9E, 0xA1):
            self.unknown_op_code()

        source = self.instruction.decode()[1]
        key_pressed = self.is_key_pressed(self.registers['v'][source])

        if operation == 0x9E and key_pressed:
            self.registers['pc'] += 2

        if operation == 0xA1 and not key_pressed:
            self.registers['pc'] += 2

    def misc_routines(self):
        """
        Will execute one of the routines specified in misc_routine_lookup.
        """
        operation = self.instruction.kk
        try:
            routine = self.misc_routine_lookup[operation]
        except KeyError:
            raise UnknownOpCodeException(self.instruction.operand)
        routine()

    # O P E R A T I O N S #####################################################

    def clear_return(self):
        """
        Opcodes starting with a 0 are one of the following instructions:

            0000 - No operation
            00E0 - Clear the display
            00EE - Return from subroutine

        Any other 0nnn (a call to a machine code routine on the original
        hardware) is not supported.
        """
        operand = self.instruction.operand
        if operand == 0x0000:
            return

        if operand == 0x00E0:
            self.display.clear()
            return

        if operand == 0x00EE:
            if self.registers['sp'] == 0:
                raise StackUnderflowException()
            self.registers['sp'] -= 1
            self.registers['pc'] = self.stack[self.registers['sp']]
            return

        self.unknown_op_code()

    def jump_to_address(self):
        """
        1nnn - JUMP nnn

        Jump to address. The address to jump to is calculated using the bits
        taken from the operand as follows:

           Bits:  15-12    11-8      7-4      3-0
                  unused  address  address  address
        """
        self.registers['pc'] = self.instruction.nnn

    def jump_to_subroutine(self):
        """
        2nnn - CALL nnn

        Jump to subroutine. Save the current program counter on the stack. The
        subroutine to jump to is taken from the operand as follows:

           Bits:  15-12    11-8      7-4      3-0
                  unused  address  address  address
        """
        if self.registers['sp'] >= STACK_SIZE:
            raise StackOverflowException(self.instruction.nnn)
        self.stack[self.registers['sp']] = self.registers['pc']
        self.registers['sp'] += 1
        self.registers['pc'] = self.instruction.nnn

    def skip_if_reg_equal_val(self):
        """
        3snn - SKE Vs, nn

        Skip if register contents equal to constant value. The calculation for
        the register and constant is performed on the operand:

           Bits:  15-12     11-8      7-4       3-0
                  unused   source  constant  constant

        The program counter is updated to skip the next instruction by
        advancing it by 2 bytes.
        """
        source = self.instruction.decode()[1]
        if self.registers['v'][source] == self.instruction.kk:
            self.registers['pc'] += 2

    def skip_if_reg_not_equal_val(self):
        """
        4snn - SKNE Vs, nn

        Skip if register contents not equal to constant value.
        """
        source = self.instruction.decode()[1]
        if self.registers['v'][source] != self.instruction.kk:
            self.registers['pc'] += 2

    def skip_if_reg_equal_reg(self):
        """
        5st0 - SKE Vs, Vt

        Skip if source register is equal to target register. The calculation
        for the registers to use is performed on the operand:

           Bits:  15-12     11-8      7-4       3-0
                  unused   source    target      0
        """
        _, source, target, variant = self.instruction.decode()
        if variant != 0:
            self.unknown_op_code()
        if self.registers['v'][source] == self.registers['v'][target]:
            self.registers['pc'] += 2

    def move_value_to_reg(self):
        """
        6snn - LOAD Vs, nn

        Move the constant value into the specified register.
        """
        target = self.instruction.decode()[1]
        self.registers['v'][target] = self.instruction.kk

    def add_value_to_reg(self):
        """
        7snn - ADD Vs, nn

        Add the constant value to the specified register. The result wraps
        at 8 bits and VF is left alone. The calculation for the registers is
        performed on the operand:

           Bits:  15-12     11-8      7-4       3-0
                  unused   target    value     value
        """
        target = self.instruction.decode()[1]
        temp = self.registers['v'][target] + self.instruction.kk
        self.registers['v'][target] = temp & 0xFF

    def move_reg_into_reg(self):
        """
        8st0 - LOAD Vs, Vt

        Move the value of the source register into the value of the target
        register. The calculation for the registers is performed on the
        operand:

           Bits:  15-12     11-8      7-4       3-0
                  unused   target    source      0
        """
        _, target, source, _ = self.instruction.decode()
        self.registers['v'][target] = self.registers['v'][source]

    def logical_or(self):
        """
        8ts1 - OR   Vt, Vs
        """
        _, target, source, _ = self.instruction.decode()
        self.registers['v'][target] |= self.registers['v'][source]

    def logical_and(self):
        """
        8ts2 - AND  Vt, Vs
        """
        _, target, source, _ = self.instruction.decode()
        self.registers['v'][target] &= self.registers['v'][source]

    def exclusive_or(self):
        """
        8ts3 - XOR  Vt, Vs
        """
        _, target, source, _ = self.instruction.decode()
        self.registers['v'][target] ^= self.registers['v'][source]

    def add_reg_to_reg(self):
        """
        8ts4 - ADD  Vt, Vs

        Add the value in the source register to the value in the target
        register, and store the result in the target register. The register
        calculations are as follows:

           Bits:  15-12     11-8      7-4       3-0
                  unused   target    source      4

        If a carry is generated, set a carry flag in register VF. The flag is
        written after the result.
        """
        _, target, source, _ = self.instruction.decode()
        temp = self.registers['v'][target] + self.registers['v'][source]
        self.registers['v'][target] = temp & 0xFF
        self.registers['v'][FLAG_REGISTER] = 1 if temp > 0xFF else 0

    def subtract(self, target, minuend, subtrahend):
        """
        Store minuend - subtrahend in the target register. VF is set to 1 if
        no borrow is needed, and 0 otherwise.
        """
        temp = minuend - subtrahend
        self.registers['v'][target] = temp & 0xFF
        self.registers['v'][FLAG_REGISTER] = 0 if temp < 0 else 1

    def subtract_reg_from_reg(self):
        """
        8ts5 - SUB  Vt, Vs

        Subtract the value in the source register from the value in the target
        register, and store the result in the target register. The register
        calculations are as follows:

           Bits:  15-12     11-8      7-4       3-0
                  unused   target    source      5

        If a borrow is NOT generated, set a carry flag in register VF.
        """
        _, target, source, _ = self.instruction.decode()
        self.subtract(target, self.registers['v'][target], self.registers['v'][source])

    def right_shift_reg(self):
        """
        8s06 - SHR  Vs

        Shift the bits in the specified register 1 bit to the right. Bit
        0 will be shifted into register VF. VF is written before the shift,
        so shifting VF itself shifts the new flag. The register calculation
        is as follows:

           Bits:  15-12     11-8      7-4       3-0
                  unused   source   ignored      6
        """
        source = self.instruction.decode()[1]
        self.registers['v'][FLAG_REGISTER] = self.registers['v'][source] & 0x1
        self.registers['v'][source] >>= 1

    def subtract_reg_from_reg_reversed(self):
        """
        8ts7 - SUBN Vt, Vs

        Subtract the value in the target register from the value in the
        source register, and store the result in the target register. VF is
        set as for SUB.
        """
        _, target, source, _ = self.instruction.decode()
        self.subtract(target, self.registers['v'][source], self.registers['v'][target])

    def left_shift_reg(self):
        """
        8s0E - SHL  Vs

        Shift the bits in the specified register 1 bit to the left. Bit
        7 will be shifted into register VF. As with SHR, VF is written
        before the shift. The register calculation is as follows:

           Bits:  15-12     11-8      7-4       3-0
                  unused   source   ignored      E
        """
        source = self.instruction.decode()[1]
        self.registers['v'][FLAG_REGISTER] = (self.registers['v'][source] & 0x80) >> 7
        self.registers['v'][source] = (self.registers['v'][source] << 1) & 0xFF

    def skip_if_reg_not_equal_reg(self):
        """
        9st0 - SKNE Vs, Vt

        Skip if source register is not equal to target register.
        """
        _, source, target, variant = self.instruction.decode()
        if variant != 0:
            self.unknown_op_code()
        if self.registers['v'][source] != self.registers['v'][target]:
            self.registers['pc'] += 2

    def load_index_reg_with_value(self):
        """
        Annn - LOAD I, nnn

        Load index register with constant value. The calculation for the
        constant value is performed on the operand:

           Bits:  15-12     11-8      7-4       3-0
                  unused   constant  constant  constant
        """
        self.registers['index'] = self.instruction.nnn

    def jump_to_v0_plus_value(self):
        """
        Bnnn - JUMP [V0] + nnn

        Load the program counter with the operand address plus the value of
        register V0.
        """
        self.registers['pc'] = self.instruction.nnn + self.registers['v'][0]

    def generate_random_number(self):
        """
        Ctnn - RAND Vt, nn

        A random number between 0 and 255 is generated. The contents of it are
        then ANDed with the constant value passed in the operand. The result is
        stored in the target register. The register and constant values are
        calculated as follows:

           Bits:  15-12     11-8      7-4       3-0
                  unused    target    value    value
        """
        target = self.instruction.decode()[1]
        self.registers['v'][target] = self.instruction.kk & randint(0, 255)

    def draw_sprite(self):
        """
        Dxyn - DRAW x, y, num_bytes

        Draws the sprite pointed to in the index register at the specified
        x and y coordinates. Drawing is done via an XOR routine, meaning that
        if the target pixel is already turned on, and a pixel is set to be
        turned on at that same location via the draw, then the pixel is turned
        off. The routine will wrap the pixels if they are drawn off the edge
        of the screen. Each sprite is 8 bits (1 byte) wide. The num_bytes
        parameter sets how tall the sprite is. Consecutive bytes in the memory
        pointed to by the index register make up the bytes of the sprite.

        The x_source and y_source tell which registers contain the x and y
        coordinates for the sprite. If drawing the sprite turns any pixel
        off, then VF will be set to 1, otherwise 0.

           Bits:  15-12     11-8      7-4       3-0
                  unused    x_source  y_source  num_bytes
        """
        _, x_source, y_source, num_bytes = self.instruction.decode()
        x_pos = self.registers['v'][x_source]
        y_pos = self.registers['v'][y_source]
        index = self.registers['index']
        sprite_rows = [self.memory.read(index + row) for row in range(num_bytes)]
        collision = self.display.draw_sprite(x_pos, y_pos, sprite_rows)
        self.registers['v'][FLAG_REGISTER] = 1 if collision else 0

    def move_delay_timer_into_reg(self):
        """
        Ft07 - LOAD Vt, DELAY

        Move the value of the delay timer into the target register. The
        register calculation is as follows:

           Bits:  15-12     11-8      7-4       3-0
                  unused    target     0         7
        """
        target = self.instruction.decode()[1]
        self.registers['v'][target] = self.timers['delay']

    def wait_for_keypress(self):
        """
        Ft0A - KEYD Vt

        Stop execution until a key is pressed. Move the value of the key
        pressed into the specified register. If no key is down, the program
        counter is moved back onto this instruction so that the next step
        checks again; nothing else executes until a key is pressed.

           Bits:  15-12     11-8      7-4       3-0
                  unused    target     0         A
        """
        target = self.instruction.decode()[1]
        for key_value, pressed in enumerate(self.keys):
            if pressed:
                self.registers['v'][target] = key_value
                return
        self.registers['pc'] -= 2

    def move_reg_into_delay_timer(self):
        """
        Fs15 - LOAD DELAY, Vs
        """
        source = self.instruction.decode()[1]
        self.timers['delay'] = self.registers['v'][source]

    def move_reg_into_sound_timer(self):
        """
        Fs18 - LOAD SOUND, Vs
        """
        source = self.instruction.decode()[1]
        self.timers['sound'] = self.registers['v'][source]

    def add_reg_into_index(self):
        """
        Fs1E - ADD  I, Vs

        Add the value of the register into the index register value. The
        index register is 16 bits wide and wraps around.
        """
        source = self.instruction.decode()[1]
        temp = self.registers['index'] + self.registers['v'][source]
        self.registers['index'] = temp & 0xFFFF

    def load_index_with_reg_sprite(self):
        """
        Fs29 - LOAD I, Vs

        Load the index with the sprite indicated in the source register. All
        sprites are 5 bytes long, so the location of the specified sprite
        is its index multiplied by 5. The register calculation is as
        follows:

           Bits:  15-12     11-8      7-4       3-0
                  unused    source     2         9
        """
        source = self.instruction.decode()[1]
        self.registers['index'] = FONT_START + self.registers['v'][source] * FONT_SPRITE_SIZE

    def store_bcd_in_memory(self):
        """
        Fs33 - BCD

        Take the value stored in source and place the digits in the following
        locations:

            hundreds   -> self.memory[index]
            tens       -> self.memory[index + 1]
            ones       -> self.memory[index + 2]

        For example, if the value is 123, then the following values will be
        placed at the specified locations:

             1 -> self.memory[index]
             2 -> self.memory[index + 1]
             3 -> self.memory[index + 2]

        The register calculation is as follows:

           Bits:  15-12     11-8      7-4       3-0
                  unused    source     3         3
        """
        source = self.instruction.decode()[1]
        value = self.registers['v'][source]
        index = self.registers['index']
        self.memory.write(index, value // 100)
        self.memory.write(index + 1, (value // 10) % 10)
        self.memory.write(index + 2, value % 10)

    def store_regs_in_memory(self):
        """
        Fs55 - STOR [I], Vs

        Store the V registers V0 through Vs in the memory pointed to by the
        index register. The index register itself is not changed. The
        register calculation is as follows:

           Bits:  15-12     11-8      7-4       3-0
                  unused    source     5         5

        For example, to store all of the V registers, the source nibble
        would be 'F'.
        """
        source = self.instruction.decode()[1]
        index = self.registers['index']
        for counter in range(source + 1):
            self.memory.write(index + counter, self.registers['v'][counter])

    def read_regs_from_memory(self):
        """
        Fs65 - LOAD Vs, [I]

        Read the V registers V0 through Vs from the memory pointed to by the
        index register.
        """
        source = self.instruction.decode()[1]
        index = self.registers['index']
        for counter in range(source + 1):
            self.registers['v'][counter] = self.memory.read(index + counter)

    # S T A T E ###############################################################

    def reset(self):
        """
        Reset the CPU by blanking out all registers, the stack, the keys and
        the display, and resetting the program counter to its starting value.
        Memory is left as it is, so a loaded program can be restarted.
        """
        self.registers['v'] = [0] * NUM_REGISTERS
        self.registers['pc'] = PROGRAM_COUNTER_START
        self.registers['sp'] = 0
        self.registers['index'] = 0
        self.timers['delay'] = 0
        self.timers['sound'] = 0
        self.stack = [0] * STACK_SIZE
        self.keys = [False] * NUM_KEYS
        self.instruction = Instruction(0)
        self.display.clear()
        with self.control_lock:
            self.steps = 0
            self.quitting = False
        logger.debug("CPU reset")

    def load(self, rom_data):
        """
        Load a program into memory at PROGRAM_COUNTER_START, along with the
        built-in font.

        :param rom_data: the raw bytes of the ROM
        """
        self.memory.load(bytes(rom_data))
        logger.debug("Loaded %d byte ROM at %03X", len(rom_data), PROGRAM_COUNTER_START)

    def decrement_timers(self):
        """
        Decrement both the sound and delay timer.
        """
        if self.timers['delay'] != 0:
            self.timers['delay'] -= 1

        if self.timers['sound'] != 0:
            self.timers['sound'] -= 1

    def check_key(self, key_value):
        if not 0 <= key_value < NUM_KEYS:
            raise InvalidKeyException(key_value)

    def key_down(self, key_value):
        self.check_key(key_value)
        self.keys[key_value] = True

    def key_up(self, key_value):
        self.check_key(key_value)
        self.keys[key_value] = False

    def is_key_pressed(self, key_value):
        self.check_key(key_value)
        return self.keys[key_value]

    def get_display(self):
        return self.display
