# CHIP-8 INFO
# https://chip-8.github.io/extensions/#chip-8
# https://chip-8.github.io/links/
#
# COGWOOD'S TECHNICAL REFERENCE
# http://devernay.free.fr/hacks/chip8/C8TECH10.HTM
#
# MACHINE CORE
# memory, registers, call stack, timers, keypad and framebuffer of a CHIP-8
# computer, plus the fetch/decode/execute engine driving them.
# the core never touches a window, a file or a clock: the host hands it the
# program bytes, the key states, the 60Hz timer ticks and an instruction budget.


import os
import random
from collections import namedtuple
from enum import Enum
from functools import wraps


# ******************** STATIC SECTION
C8_FONTS = [0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
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
            0xF0, 0x80, 0xF0, 0x80, 0x80]  # F

FONT_SPRITE_SIZE = 5        # each character font is made of 5 bytes
MEM_SIZE = 4096
ROM_START_ADDRESS = 0x200
MAX_PROGRAM_SIZE = MEM_SIZE - ROM_START_ADDRESS
STACK_SIZE = 16
NUM_REGISTERS = 16
FLAG_REGISTER = 0xF         # VF doubles as carry/borrow/collision flag
NUM_KEYS = 16
KEY_PRESSED = 255
SCREEN_WIDTH = 64
SCREEN_HEIGHT = 32
SCREEN_SIZE = SCREEN_WIDTH * SCREEN_HEIGHT
PIXEL_ON = 255
PIXEL_OFF = 0
DEBUG = True if int(os.getenv('DEBUG', 0)) >= 1 else False


# ******************** ERRORS SECTION
class Chip8Error(Exception):
    """base class of every fault the machine reports to its host"""


class StackOverflow(Chip8Error):
    def __init__(self):
        super().__init__(f"The CHIP-8 stack can contain at most {STACK_SIZE} addresses. Limit exceeded")


class StackUnderflow(Chip8Error):
    def __init__(self):
        super().__init__("Return from subroutine attempted with an empty stack")


class InvalidKey(Chip8Error):
    def __init__(self, key):
        self.key = key
        super().__init__(f"Invalid key {key!r}, the keypad only has keys 0x0 to 0xF")


class UnimplementedInstruction(Chip8Error):
    def __init__(self, word):
        self.word = word
        super().__init__(f"0x{word:04x} is not an instruction")


class ProgramTooLarge(Chip8Error):
    def __init__(self, size):
        self.size = size
        super().__init__(f"The program is {size} bytes long, at most {MAX_PROGRAM_SIZE} bytes fit in memory")


class MemoryAccessError(Chip8Error):
    def __init__(self, address):
        self.address = address
        super().__init__(f"Address 0x{address:04x} is outside of the {MEM_SIZE} bytes of memory")


# ******************** UTILITIES SECTION
def asm(msg):
    """decorator to print out the ASM of the instruction being executed"""
    def decorator(fn):
        @wraps(fn)
        def wrapper_fn(self, ins):
            if DEBUG:
                print(f"mem_addr: 0x{self.pc:04x}    instruction: " + msg.format(**ins._asdict()))
            return fn(self, ins)
        return wrapper_fn
    return decorator


# ******************** DECODER SECTION
class Op(Enum):
    CLS = "00E0"
    RET = "00EE"
    JP = "1nnn"
    CALL = "2nnn"
    SE_VX_KK = "3xkk"
    SNE_VX_KK = "4xkk"
    SE_VX_VY = "5xy0"
    LD_VX_KK = "6xkk"
    ADD_VX_KK = "7xkk"
    LD_VX_VY = "8xy0"
    OR = "8xy1"
    AND = "8xy2"
    XOR = "8xy3"
    ADD_VX_VY = "8xy4"
    SUB = "8xy5"
    SHR = "8xy6"
    SUBN = "8xy7"
    SHL = "8xyE"
    SNE_VX_VY = "9xy0"
    LD_I = "Annn"
    JP_V0 = "Bnnn"
    RND = "Cxkk"
    DRW = "Dxyn"
    SKP = "Ex9E"
    SKNP = "ExA1"
    LD_VX_DT = "Fx07"
    LD_VX_K = "Fx0A"
    LD_DT_VX = "Fx15"
    LD_ST_VX = "Fx18"
    ADD_I_VX = "Fx1E"
    LD_F_VX = "Fx29"
    LD_B_VX = "Fx33"
    LD_MEM_VX = "Fx55"
    LD_VX_MEM = "Fx65"


Instruction = namedtuple("Instruction", ["op", "word", "x", "y", "n", "kk", "addr"])

# every pattern appears under exactly one mask, so lookup order doesn't matter
OPCODE_MASKS = (
    (0xFFFF, {0x00E0: Op.CLS, 0x00EE: Op.RET}),
    (0xF000, {0x1000: Op.JP, 0x2000: Op.CALL, 0x3000: Op.SE_VX_KK, 0x4000: Op.SNE_VX_KK,
              0x6000: Op.LD_VX_KK, 0x7000: Op.ADD_VX_KK, 0xA000: Op.LD_I, 0xB000: Op.JP_V0,
              0xC000: Op.RND, 0xD000: Op.DRW}),
    (0xF00F, {0x5000: Op.SE_VX_VY, 0x8000: Op.LD_VX_VY, 0x8001: Op.OR, 0x8002: Op.AND,
              0x8003: Op.XOR, 0x8004: Op.ADD_VX_VY, 0x8005: Op.SUB, 0x8006: Op.SHR,
              0x8007: Op.SUBN, 0x800E: Op.SHL, 0x9000: Op.SNE_VX_VY}),
    (0xF0FF, {0xE09E: Op.SKP, 0xE0A1: Op.SKNP, 0xF007: Op.LD_VX_DT, 0xF00A: Op.LD_VX_K,
              0xF015: Op.LD_DT_VX, 0xF018: Op.LD_ST_VX, 0xF01E: Op.ADD_I_VX, 0xF029: Op.LD_F_VX,
              0xF033: Op.LD_B_VX, 0xF055: Op.LD_MEM_VX, 0xF065: Op.LD_VX_MEM}),
)


def decode(word):
    """split an instruction word into its nibble fields and tag it with the matching operation"""
    for mask, ops in OPCODE_MASKS:
        op = ops.get(word & mask)
        if op is not None:
            break
    else:
        raise UnimplementedInstruction(word)
    return Instruction(
        op=op,
        word=word,
        x=(word & 0x0F00) >> 8,
        y=(word & 0x00F0) >> 4,
        n=word & 0x000F,
        kk=word & 0x00FF,
        addr=word & 0x0FFF,
    )


# ******************** MEMORY SECTION
# ********** WRAPS A BYTEARRAY TO REPRESENT THE MAIN MEMORY WITH A FIXED SIZE OF 4KB
class Memory:
    def __init__(self):
        self.inner = bytearray(MEM_SIZE)

    def __len__(self):
        return MEM_SIZE

    @staticmethod
    def _bounds(key):
        """return the [start, stop) range touched by key, raise if any of it is outside memory"""
        if isinstance(key, slice):
            if key.step not in (None, 1):
                raise ValueError("memory slices must be contiguous")
            start = 0 if key.start is None else key.start
            stop = MEM_SIZE if key.stop is None else key.stop
        else:
            start, stop = key, key + 1
        if start < 0:
            raise MemoryAccessError(start)
        if stop > MEM_SIZE:
            raise MemoryAccessError(max(start, MEM_SIZE))
        return start, stop

    def __getitem__(self, key):
        start, stop = self._bounds(key)
        if isinstance(key, slice):
            return bytes(self.inner[start:stop])
        return self.inner[start]

    def __setitem__(self, key, value):
        start, stop = self._bounds(key)
        if isinstance(key, slice):
            value = bytes(value)
            if len(value) != stop - start:
                raise ValueError("memory has a fixed size, slice assignments can't resize it")
            self.inner[start:stop] = value
        else:
            self.inner[start] = value

    def word(self, address):
        """read the big endian 16 bit word stored at address"""
        hi, lo = self[address:address + 2]
        return hi << 8 | lo

    def load(self, program):
        """wipe memory, then write the font set at 0x000 and the program at ROM_START_ADDRESS"""
        if len(program) > MAX_PROGRAM_SIZE:
            raise ProgramTooLarge(len(program))
        self.inner[:] = bytes(MEM_SIZE)
        self.inner[0x00:0x00 + len(C8_FONTS)] = bytes(C8_FONTS)
        self.inner[ROM_START_ADDRESS:ROM_START_ADDRESS + len(program)] = program


# ********** WRAPS A LIST TO REPRESENT A STACK WITH A LIMITED SIZE OF 16 ADDRESSES
class Stack:
    def __init__(self):
        self.addr_list = [0] * STACK_SIZE
        self.sp = 0

    def push(self, address):
        if self.sp >= STACK_SIZE:
            raise StackOverflow()
        self.addr_list[self.sp] = address
        self.sp += 1

    def pop(self):
        if self.sp == 0:
            raise StackUnderflow()
        self.sp -= 1
        return self.addr_list[self.sp]

    def clear(self):
        self.addr_list = [0] * STACK_SIZE
        self.sp = 0


# ******************** I/O SECTION
class Keypad:
    """press state of the 16 keys, nonzero means pressed"""
    def __init__(self):
        self.states = bytearray(NUM_KEYS)

    @staticmethod
    def _check(key):
        if not isinstance(key, int) or not 0 <= key < NUM_KEYS:
            raise InvalidKey(key)

    def __getitem__(self, key):
        self._check(key)
        return self.states[key] != 0

    def __setitem__(self, key, pressed):
        self._check(key)
        self.states[key] = KEY_PRESSED if pressed else 0

    def untouched(self):
        return not any(self.states)

    def release_all(self):
        self.states[:] = bytes(NUM_KEYS)


class Display:
    """64x32 framebuffer, one byte per pixel, row-major"""
    def __init__(self, w=SCREEN_WIDTH, h=SCREEN_HEIGHT):
        self.w, self.h = w, h
        self.buffer = bytearray(w * h)

    def __str__(self):
        rows = []
        for y in range(self.h):
            row = self.buffer[y * self.w:(y + 1) * self.w]
            rows.append("".join("." if pixel == PIXEL_OFF else "x" for pixel in row))
        return "\n".join(rows)

    def read_pixel(self, x, y):
        return self.buffer[y * self.w + x]

    def xor_pixel(self, x, y, color):
        """toggle the pixel at (x, y) with color and return the value it had before"""
        offset = y * self.w + x
        old = self.buffer[offset]
        self.buffer[offset] = old ^ color
        return old

    def clear(self):
        self.buffer[:] = bytes(len(self.buffer))

    def view(self):
        return memoryview(self.buffer).toreadonly()


# ******************** CPU SECTION
class Chip8:
    def __init__(self, program, rng=None):
        self.program = bytes(program)
        if len(self.program) > MAX_PROGRAM_SIZE:
            raise ProgramTooLarge(len(self.program))
        self.rng = rng if rng is not None else random.Random()
        self.mem = Memory()
        self.stack = Stack()
        self.keys = Keypad()
        self.display = Display()
        self.v_regs = [0] * NUM_REGISTERS
        self.pc = ROM_START_ADDRESS
        self.idx = 0    # specify where the sprites reside in memory
        self.dt = 0     # delay timer
        self.st = 0     # sound timer
        self.waiting_for_key = None     # key index Fx0A is blocked on
        self.instructions = {
            Op.CLS: self._clear_screen,
            Op.RET: self._return,
            Op.JP: self._jump,
            Op.CALL: self._call_addr,
            Op.SE_VX_KK: self._skip_if_eq,
            Op.SNE_VX_KK: self._skip_if_not_eq,
            Op.SE_VX_VY: self._skip_if_eq_regs,
            Op.LD_VX_KK: self._set_vk,
            Op.ADD_VX_KK: self._add_to_vk,
            Op.LD_VX_VY: self._set_vx_to_vy,
            Op.OR: self._set_vx_or_vy,
            Op.AND: self._set_vx_and_vy,
            Op.XOR: self._set_vx_xor_vy,
            Op.ADD_VX_VY: self._add_vx_vy,
            Op.SUB: self._sub_vx_vy,
            Op.SHR: self._shr,
            Op.SUBN: self._subn_vx_vy,
            Op.SHL: self._shl,
            Op.SNE_VX_VY: self._skip_if_not_eq_regs,
            Op.LD_I: self._set_idx,
            Op.JP_V0: self._jump_plus,
            Op.RND: self._random_byte_and,
            Op.DRW: self._to_screen,
            Op.SKP: self._skip_if_pressed,
            Op.SKNP: self._skip_if_not_pressed,
            Op.LD_VX_DT: self._set_vx_dt,
            Op.LD_VX_K: self._wait_keypress,
            Op.LD_DT_VX: self._set_dt_vx,
            Op.LD_ST_VX: self._set_st,
            Op.ADD_I_VX: self._add_to_idx,
            Op.LD_F_VX: self._select_char,
            Op.LD_B_VX: self._bcd_repr,
            Op.LD_MEM_VX: self._store_vregs,
            Op.LD_VX_MEM: self._load_vregs,
        }
        self.reset()

    def __str__(self):
        try:
            instr = f"0x{self.fetch():04X}"
        except MemoryAccessError:
            instr = "------"
        regs = " ".join(f"{reg:02x}" for reg in self.v_regs)
        registers = f"pc: $0x{self.pc:04X}, instr: {instr}, i: 0x{self.idx:04X}, regs [{regs}]"
        timers = f"dt: {self.dt}, st: {self.st}"
        stack = f"sp: {self.stack.sp}, stack: {self.stack.addr_list[:self.stack.sp]}"
        flags = f"waiting_for_key: {self.waiting_for_key}"
        return f"{registers}\n{timers}\n{stack}\n{flags}"

    # ********** HOST INTERFACE
    def reset(self):
        """bring registers, stack, keypad and memory back to power-on state, timers and display are left alone"""
        self.mem.load(self.program)
        self.v_regs[:] = [0] * NUM_REGISTERS
        self.stack.clear()
        self.keys.release_all()
        self.pc = ROM_START_ADDRESS
        self.idx = 0
        self.waiting_for_key = None

    def advance_timers(self):
        """one 60Hz tick: both timers count down by one, wrapping from 0 to 255"""
        self.dt = (self.dt - 1) & 0xFF
        self.st = (self.st - 1) & 0xFF

    def set_key_state(self, key, pressed):
        self.keys[key] = pressed
        if self.waiting_for_key == key:
            self.waiting_for_key = None

    def read_display(self):
        return self.display.view()

    def dump_display(self):
        return str(self.display)

    def execute(self, max_instructions):
        """
        run up to max_instructions instructions
        nothing runs while Fx0A is waiting for its key, and whatever is left of the
        budget once Fx0A blocks is dropped rather than carried over to the next call
        """
        if max_instructions < 0:
            raise ValueError(f"instruction count must be non-negative, got {max_instructions}")
        if self.waiting_for_key is not None:
            return
        for _ in range(max_instructions):
            self.cycle()
            if self.waiting_for_key is not None:
                break

    def fetch(self):
        """each instruction is two bytes long, most significant byte first"""
        return self.mem.word(self.pc)

    def cycle(self):
        instruction = decode(self.fetch())
        self.instructions[instruction.op](instruction)

    # ********** FLOW CONTROL
    def _goto_next_instruction(self):
        self.pc += 0x2

    def _skip_if(self, condition):
        self.pc += 0x4 if condition else 0x2

    @asm("CLS")
    def _clear_screen(self, ins):
        self.display.clear()
        self._goto_next_instruction()

    @asm("RET")
    def _return(self, ins):
        """return from a subroutine"""
        self.pc = self.stack.pop()

    @asm("JP 0x{addr:03x}")
    def _jump(self, ins):
        self.pc = ins.addr

    @asm("CALL 0x{addr:03x}")
    def _call_addr(self, ins):
        self.stack.push(self.pc + 0x2)
        self.pc = ins.addr

    @asm("JP V0, 0x{addr:03x}")
    def _jump_plus(self, ins):
        self.pc = ins.addr + self.v_regs[0x0]

    @asm("SE V{x:X}, 0x{kk:02x}")
    def _skip_if_eq(self, ins):
        self._skip_if(self.v_regs[ins.x] == ins.kk)

    @asm("SNE V{x:X}, 0x{kk:02x}")
    def _skip_if_not_eq(self, ins):
        self._skip_if(self.v_regs[ins.x] != ins.kk)

    @asm("SE V{x:X}, V{y:X}")
    def _skip_if_eq_regs(self, ins):
        self._skip_if(self.v_regs[ins.x] == self.v_regs[ins.y])

    @asm("SNE V{x:X}, V{y:X}")
    def _skip_if_not_eq_regs(self, ins):
        self._skip_if(self.v_regs[ins.x] != self.v_regs[ins.y])

    # ********** REGISTERS AND ALU
    @asm("LD V{x:X}, 0x{kk:02x}")
    def _set_vk(self, ins):
        """set the value of one of the 16 variable registers, Vx"""
        self.v_regs[ins.x] = ins.kk
        self._goto_next_instruction()

    @asm("ADD V{x:X}, 0x{kk:02x}")
    def _add_to_vk(self, ins):
        """add kk to Vx, VF is left untouched"""
        self.v_regs[ins.x] = (self.v_regs[ins.x] + ins.kk) & 0xFF
        self._goto_next_instruction()

    @asm("LD V{x:X}, V{y:X}")
    def _set_vx_to_vy(self, ins):
        self.v_regs[ins.x] = self.v_regs[ins.y]
        self._goto_next_instruction()

    @asm("OR V{x:X}, V{y:X}")
    def _set_vx_or_vy(self, ins):
        self.v_regs[ins.x] |= self.v_regs[ins.y]
        self._goto_next_instruction()

    @asm("AND V{x:X}, V{y:X}")
    def _set_vx_and_vy(self, ins):
        self.v_regs[ins.x] &= self.v_regs[ins.y]
        self._goto_next_instruction()

    @asm("XOR V{x:X}, V{y:X}")
    def _set_vx_xor_vy(self, ins):
        self.v_regs[ins.x] ^= self.v_regs[ins.y]
        self._goto_next_instruction()

    # the flag is written before Vx, so when x is F the result wins
    @asm("ADD V{x:X}, V{y:X}")
    def _add_vx_vy(self, ins):
        """set Vx = Vx + Vy, VF = carry"""
        total = self.v_regs[ins.x] + self.v_regs[ins.y]
        self.v_regs[FLAG_REGISTER] = 1 if total > 0xFF else 0
        self.v_regs[ins.x] = total & 0xFF     # keep only the lowest 8 bits
        self._goto_next_instruction()

    @asm("SUB V{x:X}, V{y:X}")
    def _sub_vx_vy(self, ins):
        """set Vx = Vx - Vy, VF = 1 when Vy > Vx"""
        vx, vy = self.v_regs[ins.x], self.v_regs[ins.y]
        self.v_regs[FLAG_REGISTER] = 1 if vy > vx else 0
        self.v_regs[ins.x] = (vx - vy) & 0xFF
        self._goto_next_instruction()

    @asm("SHR V{x:X}")
    def _shr(self, ins):
        """set Vx = Vx SHR 1, VF = the bit shifted out"""
        vx = self.v_regs[ins.x]
        self.v_regs[FLAG_REGISTER] = vx & 0x1
        self.v_regs[ins.x] = vx >> 1
        self._goto_next_instruction()

    @asm("SUBN V{x:X}, V{y:X}")
    def _subn_vx_vy(self, ins):
        """set Vx = Vy - Vx, VF = 1 when Vx > Vy"""
        vx, vy = self.v_regs[ins.x], self.v_regs[ins.y]
        self.v_regs[FLAG_REGISTER] = 1 if vx > vy else 0
        self.v_regs[ins.x] = (vy - vx) & 0xFF
        self._goto_next_instruction()

    @asm("SHL V{x:X}")
    def _shl(self, ins):
        """set Vx = Vx SHL 1, VF = the bit shifted out"""
        vx = self.v_regs[ins.x]
        self.v_regs[FLAG_REGISTER] = (vx & 0x80) >> 7
        self.v_regs[ins.x] = (vx << 1) & 0xFF
        self._goto_next_instruction()

    @asm("RND V{x:X}, 0x{kk:02x}")
    def _random_byte_and(self, ins):
        self.v_regs[ins.x] = self.rng.randint(0, 255) & ins.kk
        self._goto_next_instruction()

    # ********** INDEX REGISTER AND MEMORY
    @asm("LD I, 0x{addr:03x}")
    def _set_idx(self, ins):
        self.idx = ins.addr
        self._goto_next_instruction()

    @asm("ADD I, V{x:X}")
    def _add_to_idx(self, ins):
        """set I = I + Vx, no overflow flag"""
        self.idx = (self.idx + self.v_regs[ins.x]) & 0xFFFF
        self._goto_next_instruction()

    @asm("LD F, V{x:X}")
    def _select_char(self, ins):
        """set I to location of sprite for digit Vx"""
        self.idx = self.v_regs[ins.x] * FONT_SPRITE_SIZE
        self._goto_next_instruction()

    @asm("LD B, V{x:X}")
    def _bcd_repr(self, ins):
        """store the hundreds digit of Vx at I, the tens digit at I+1 and the ones digit at I+2"""
        vx = self.v_regs[ins.x]
        self.mem[self.idx:self.idx + 3] = (vx // 100, vx // 10 % 10, vx % 10)
        self._goto_next_instruction()

    @asm("LD [I], V{x:X}")
    def _store_vregs(self, ins):
        """store registers V0 through Vx (included) in memory starting at location I"""
        self.mem[self.idx:self.idx + ins.x + 1] = self.v_regs[:ins.x + 1]
        self.idx += ins.x + 1
        self._goto_next_instruction()

    @asm("LD V{x:X}, [I]")
    def _load_vregs(self, ins):
        """read registers V0 through Vx (included) from memory starting at location I"""
        self.v_regs[:ins.x + 1] = list(self.mem[self.idx:self.idx + ins.x + 1])
        self.idx += ins.x + 1
        self._goto_next_instruction()

    # ********** TIMERS AND KEYPAD
    @asm("LD V{x:X}, DT")
    def _set_vx_dt(self, ins):
        self.v_regs[ins.x] = self.dt
        self._goto_next_instruction()

    @asm("LD DT, V{x:X}")
    def _set_dt_vx(self, ins):
        self.dt = self.v_regs[ins.x]
        self._goto_next_instruction()

    @asm("LD ST, V{x:X}")
    def _set_st(self, ins):
        self.st = self.v_regs[ins.x]
        self._goto_next_instruction()

    @asm("SKP V{x:X}")
    def _skip_if_pressed(self, ins):
        """skip the following instruction if the key whose index is stored in Vx is pressed"""
        self._skip_if(self.keys[self.v_regs[ins.x]])

    @asm("SKNP V{x:X}")
    def _skip_if_not_pressed(self, ins):
        """skip the following instruction if the key whose index is stored in Vx is NOT pressed"""
        self._skip_if(not self.keys[self.v_regs[ins.x]])

    # blocks until the key whose index is held in Vx changes state, the key is never copied back into Vx
    @asm("LD V{x:X}, K")
    def _wait_keypress(self, ins):
        key = self.v_regs[ins.x]
        if not 0 <= key < NUM_KEYS:
            raise InvalidKey(key)
        self.waiting_for_key = key
        self._goto_next_instruction()

    # ********** DISPLAY
    @asm("DRW V{x:X}, V{y:X}, {n}")
    def _to_screen(self, ins):
        """display n-byte sprite starting at memory location I at (Vx, Vy), set VF = collision"""
        ox = self.v_regs[ins.x] % self.display.w
        oy = self.v_regs[ins.y] % self.display.h
        sprite = self.mem[self.idx:self.idx + ins.n]
        collision = False
        for row, sprite_byte in enumerate(sprite):
            # sprites wrap around to the opposite edge instead of being clipped
            y = (oy + row) % self.display.h
            for col in range(8):
                x = (ox + col) % self.display.w
                color = PIXEL_ON if (sprite_byte >> (7 - col)) & 0x1 else PIXEL_OFF
                # a pixel gets erased only when it was ON and is drawn ON again
                if self.display.xor_pixel(x, y, color) and color:
                    collision = True
        self.v_regs[FLAG_REGISTER] = 1 if collision else 0
        self._goto_next_instruction()
