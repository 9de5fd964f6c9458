import logging
from collections import namedtuple
from functools import wraps

from chip8.config import FONT_BASE, FONT_GLYPH_SIZE, INSTRUCTIONS_PER_SECOND, KEY_COUNT, REGISTER_COUNT, ROM_START_ADDRESS
from chip8.errors import Chip8Error
from chip8.framebuffer import FrameBuffer
from chip8.memory import Memory, Stack
from chip8.opcodes import decode
from chip8.rng import RandomSource

log = logging.getLogger(__name__)


# COMPATIBILITY QUIRKS TABLE
# https://games.gulrak.net/cadmium/chip8-opcode-table.html
Quirks = namedtuple("Quirks", ["load_store_advances_index", "shift_reads_vy"], defaults=[True, False])


# ******************** UTILITIES SECTION
def asm(msg):
    """decorator to log the ASM of the instruction being executed"""
    def decorator(fn):
        @wraps(fn)
        def wrapper_fn(self, ins):
            if log.isEnabledFor(logging.DEBUG):
                log.debug("mem_addr: 0x%04x    instruction: %s", self.pc, msg.format(**ins._asdict()))
            return fn(self, ins)
        return wrapper_fn
    return decorator


# ******************** CPU SECTION
class Chip8:
    def __init__(self, rng=None, on_tone=None, instructions_per_second=INSTRUCTIONS_PER_SECOND, quirks=Quirks()):
        self.rng = rng if rng is not None else RandomSource()
        self.on_tone = on_tone      # called once every time the sound timer runs out
        self.instructions_per_second = instructions_per_second
        self.quirks = quirks
        self.instructions = {
            "CLS": self._clear_screen,
            "RET": self._return,
            "JP": self._jump,
            "CALL": self._call_addr,
            "SE_VX_NN": self._skip_if_eq,
            "SNE_VX_NN": self._skip_if_not_eq,
            "SE_VX_VY": self._skip_if_eq_regs,
            "LD_VX_NN": self._set_vk,
            "ADD_VX_NN": self._add_to_vk,
            "LD_VX_VY": self._set_vx_to_vy,
            "OR": self._set_vx_or_vy,
            "AND": self._set_vx_and_vy,
            "XOR": self._set_vx_xor_vy,
            "ADD_VX_VY": self._add_vx_vy,
            "SUB": self._sub_vx_vy,
            "SHR": self._shr,
            "SUBN": self._subn_vx_vy,
            "SHL": self._shl,
            "SNE_VX_VY": self._skip_if_not_eq_regs,
            "LD_I": self._set_idx,
            "JP_V0": self._jump_plus,
            "RND": self._random_byte_and,
            "DRW": self._to_screen,
            "SKP": self._skip_if_pressed,
            "SKNP": self._skip_if_not_pressed,
            "LD_VX_DT": self._set_vx_dt,
            "LD_VX_K": self._wait_keypress,
            "LD_DT_VX": self._set_dt_vx,
            "LD_ST_VX": self._set_st,
            "ADD_I_VX": self._add_to_idx,
            "LD_F_VX": self._select_char,
            "LD_B_VX": self._bcd_repr,
            "LD_MEM_VX": self._store_vregs,
            "LD_VX_MEM": self._load_vregs,
        }
        self.program = b""
        self._power_on()

    def _power_on(self):
        self.mem = Memory()
        self.stack = Stack()
        self.v_regs = [0] * REGISTER_COUNT
        self.pc = ROM_START_ADDRESS
        self.idx = 0    # specify where the sprites reside in memory
        self.dt = 0     # delay timer, active when non-zero
        self.st = 0     # sound timer, active when non-zero
        self.keys = [False] * KEY_COUNT
        self.framebuffer = FrameBuffer()
        self.fault = None

    def __str__(self):
        registers = f"PC_REGISTER:0x{self.pc:04x} | IDX_REGISTER:0x{self.idx:04x} | VARIABLE_REGISTERS:{self.v_regs}"
        timers = f"DELAY_TIMER:{self.dt} | SOUND_TIMER:{self.st}"
        stack = f"STACK:{self.stack}"
        flags = f"DRAW: {self.framebuffer.redraw} | FAULT: {self.fault}"
        return f"{registers}\n{timers}\n{stack}\n{flags}"

    # ********** HOST INTERFACE
    def load(self, program):
        """write the program image at 0x200, raise ProgramTooLarge if it doesn't fit"""
        self.mem.load_rom(program)
        self.program = bytes(program)

    def reset(self):
        """restore power-on state and reload the last program, clearing any fault"""
        self._power_on()
        if self.program:
            self.mem.load_rom(self.program)

    def key_down(self, key):
        self._check_key(key)
        log.debug("key pressed 0x%X", key)
        self.keys[key] = True

    def key_up(self, key):
        self._check_key(key)
        log.debug("key released 0x%X", key)
        self.keys[key] = False

    @staticmethod
    def _check_key(key):
        if not 0 <= key < KEY_COUNT:
            raise ValueError(f"Key id must be in 0x0..0xF, got {key!r}")

    def dump_memory(self):
        return self.mem.dump()

    def batch_size(self, elapsed):
        """number of instructions executed for the given elapsed seconds"""
        return max(0, int(round(elapsed * self.instructions_per_second)))

    def step(self, elapsed):
        """
        run the instructions due in `elapsed` seconds, then tick the timers once

        returns None on success or the Chip8Error that halted the machine
        """
        if self.fault is not None:
            return self.fault
        for _ in range(self.batch_size(elapsed)):
            fault = self.cycle()
            if fault is not None:
                return fault
        self.tick()
        return None

    def cycle(self):
        """fetch and execute a single instruction, return the fault if one occurs"""
        if self.fault is not None:
            return self.fault
        try:
            self.execute(self.fetch())
        except Chip8Error as e:
            self.fault = e
            log.error("Machine halted: %s", e)
            return e
        return None

    def fetch(self):
        # each instruction is two bytes long
        self.mem.check(self.pc, 2)
        return self.mem[self.pc] << 8 | self.mem[self.pc + 1]

    def execute(self, word):
        """decode + execute an instruction word, faults are raised"""
        instruction = decode(word, self.pc)
        self.instructions[instruction.name](instruction)

    def tick(self):
        """decrement the delay/sound timers, return True on the sound timer's falling edge"""
        if self.dt > 0:
            self.dt -= 1
        tone_edge = False
        if self.st > 0:
            tone_edge = self.st == 1
            self.st -= 1
        if tone_edge:
            log.debug("BEEP")
            if self.on_tone is not None:
                self.on_tone()
        return tone_edge

    # ********** PROGRAM COUNTER
    def _goto_next_instruction(self):
        self.pc += 0x2

    def _skip_next_instruction_if(self, condition):
        self.pc += 0x4 if condition else 0x2

    # ********** CONTROL FLOW
    @asm("CLS")
    def _clear_screen(self, ins):
        self.framebuffer.clear()
        self._goto_next_instruction()

    @asm("RET")
    def _return(self, ins):
        """return from a subroutine"""
        self.pc = self.stack.pop(self.pc)

    @asm("JP 0x{nnn:03x}")
    def _jump(self, ins):
        self.pc = ins.nnn

    @asm("CALL 0x{nnn:03x}")
    def _call_addr(self, ins):
        # the return address is the instruction after the call
        self.stack.push(self.pc + 0x2, self.pc)
        self.pc = ins.nnn

    @asm("JP V0, 0x{nnn:03x}")
    def _jump_plus(self, ins):
        self.pc = ins.nnn + self.v_regs[0x0]

    @asm("SE V{x:X}, 0x{nn:02x}")
    def _skip_if_eq(self, ins):
        self._skip_next_instruction_if(self.v_regs[ins.x] == ins.nn)

    @asm("SNE V{x:X}, 0x{nn:02x}")
    def _skip_if_not_eq(self, ins):
        self._skip_next_instruction_if(self.v_regs[ins.x] != ins.nn)

    @asm("SE V{x:X}, V{y:X}")
    def _skip_if_eq_regs(self, ins):
        self._skip_next_instruction_if(self.v_regs[ins.x] == self.v_regs[ins.y])

    @asm("SNE V{x:X}, V{y:X}")
    def _skip_if_not_eq_regs(self, ins):
        self._skip_next_instruction_if(self.v_regs[ins.x] != self.v_regs[ins.y])

    # ********** REGISTERS AND ARITHMETIC
    @asm("LD V{x:X}, 0x{nn:02x}")
    def _set_vk(self, ins):
        """set the value of one of the 16 variable registers, Vx"""
        self.v_regs[ins.x] = ins.nn
        self._goto_next_instruction()

    @asm("ADD V{x:X}, 0x{nn:02x}")
    def _add_to_vk(self, ins):
        """add to the value already present in one of the variable registers, VF untouched"""
        self.v_regs[ins.x] = (self.v_regs[ins.x] + ins.nn) & 0xFF
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

    @asm("ADD V{x:X}, V{y:X}")
    def _add_vx_vy(self, ins):
        """set the value of Vx to Vx + Vy, VF = carry"""
        total = self.v_regs[ins.x] + self.v_regs[ins.y]
        self.v_regs[ins.x] = total & 0xFF     # keep only the lowest 8 bits from the result
        self.v_regs[0xF] = 1 if total > 0xFF else 0
        self._goto_next_instruction()

    @asm("SUB V{x:X}, V{y:X}")
    def _sub_vx_vy(self, ins):
        """set the value of Vx to Vx - Vy, VF = NOT borrow"""
        vx, vy = self.v_regs[ins.x], self.v_regs[ins.y]
        self.v_regs[0xF] = 1 if vx >= vy else 0
        self.v_regs[ins.x] = (vx - vy) & 0xFF
        self._goto_next_instruction()

    @asm("SUBN V{x:X}, V{y:X}")
    def _subn_vx_vy(self, ins):
        """set the value of Vx to Vy - Vx, VF = NOT borrow"""
        vx, vy = self.v_regs[ins.x], self.v_regs[ins.y]
        self.v_regs[0xF] = 1 if vy >= vx else 0
        self.v_regs[ins.x] = (vy - vx) & 0xFF
        self._goto_next_instruction()

    def _shift_source(self, ins):
        return self.v_regs[ins.y] if self.quirks.shift_reads_vy else self.v_regs[ins.x]

    @asm("SHR V{x:X}")
    def _shr(self, ins):
        """set Vx equal to Vx SHR 1, VF = the bit shifted out"""
        value = self._shift_source(ins)
        self.v_regs[0xF] = value & 0x1
        self.v_regs[ins.x] = value >> 1
        self._goto_next_instruction()

    @asm("SHL V{x:X}")
    def _shl(self, ins):
        """set Vx equal to Vx SHL 1, VF = the bit shifted out"""
        value = self._shift_source(ins)
        self.v_regs[0xF] = (value & 0x80) >> 7
        self.v_regs[ins.x] = (value << 1) & 0xFF
        self._goto_next_instruction()

    @asm("RND V{x:X}, 0x{nn:02x}")
    def _random_byte_and(self, ins):
        self.v_regs[ins.x] = self.rng.next_byte() & ins.nn
        self._goto_next_instruction()

    # ********** INDEX REGISTER AND MEMORY
    @asm("LD I, 0x{nnn:03x}")
    def _set_idx(self, ins):
        self.idx = ins.nnn
        self._goto_next_instruction()

    @asm("ADD I, V{x:X}")
    def _add_to_idx(self, ins):
        """set I = I + Vx, VF untouched"""
        self.idx = (self.idx + self.v_regs[ins.x]) & 0xFFFF
        self._goto_next_instruction()

    @asm("LD F, V{x:X}")
    def _select_char(self, ins):
        """set I to location of sprite for digit Vx"""
        self.idx = FONT_BASE + self.v_regs[ins.x] * FONT_GLYPH_SIZE
        self._goto_next_instruction()

    @asm("LD B, V{x:X}")
    def _bcd_repr(self, ins):
        """store the hundreds digit of Vx at I, the tens digit at I+1, the ones digit at I+2"""
        value = self.v_regs[ins.x]
        self.mem[self.idx:self.idx+3] = bytes([value // 100, (value // 10) % 10, value % 10])
        self._goto_next_instruction()

    @asm("LD [I], V{x:X}")
    def _store_vregs(self, ins):
        """store registers V0 through Vx (included) in memory starting at location I"""
        self.mem[self.idx:self.idx+ins.x+1] = bytes(self.v_regs[:ins.x+1])
        self._advance_index_after_transfer(ins)
        self._goto_next_instruction()

    @asm("LD V{x:X}, [I]")
    def _load_vregs(self, ins):
        """read registers V0 through Vx (included) from memory starting at location I"""
        self.v_regs[:ins.x+1] = list(self.mem[self.idx:self.idx+ins.x+1])
        self._advance_index_after_transfer(ins)
        self._goto_next_instruction()

    def _advance_index_after_transfer(self, ins):
        if self.quirks.load_store_advances_index:
            self.idx = (self.idx + ins.x + 1) & 0xFFFF

    # ********** TIMERS
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

    # ********** KEYPAD
    def _key_held(self, key):
        # Vx can hold ids past the keypad, those are never pressed
        return key < KEY_COUNT and self.keys[key]

    @asm("SKP V{x:X}")
    def _skip_if_pressed(self, ins):
        self._skip_next_instruction_if(self._key_held(self.v_regs[ins.x]))

    @asm("SKNP V{x:X}")
    def _skip_if_not_pressed(self, ins):
        self._skip_next_instruction_if(not self._key_held(self.v_regs[ins.x]))

    @asm("LD V{x:X}, K")
    def _wait_keypress(self, ins):
        """wait for a key press and store its value in Vx"""
        held = [key for key in range(KEY_COUNT) if self.keys[key]]
        if held:
            self.v_regs[ins.x] = held[0]
            self._goto_next_instruction()
        # otherwise stay on the same instruction until a key is pressed

    # ********** DISPLAY
    @asm("DRW V{x:X}, V{y:X}, {n}")
    def _to_screen(self, ins):
        """display n-byte sprite starting at memory location I at (Vx, Vy), set VF = collision"""
        x, y = self.v_regs[ins.x], self.v_regs[ins.y]
        sprite = self.mem[self.idx:self.idx+ins.n]
        collision = 0
        for row, sprite_byte in enumerate(sprite):
            for bit in range(8):
                # sprites are XORed onto the existing screen, erasing a pixel is a collision
                if sprite_byte & (0x80 >> bit) and self.framebuffer.flip(x + bit, y + row):
                    collision = 1
        self.v_regs[0xF] = collision
        self.framebuffer.redraw = True
        self._goto_next_instruction()
