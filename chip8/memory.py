import logging

from chip8.config import FONT_BASE, MAX_PROGRAM_SIZE, MEMORY_SIZE, ROM_START_ADDRESS, STACK_SIZE
from chip8.errors import MemoryFault, ProgramTooLarge, StackOverflow, StackUnderflow

log = logging.getLogger(__name__)


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


# ********** WRAPS A LIST TO REPRESENT A STACK WITH A LIMITED SIZE OF 16 ADDRESSES
class Stack:
    def __init__(self, capacity=STACK_SIZE):
        self.addr_list = [0] * capacity
        self.capacity = capacity
        self.size = 0       # stack pointer, always in [0, capacity]

    def __len__(self):
        return self.size

    def __repr__(self):
        return "[" + ", ".join(f"0x{a:04x}" for a in self.addr_list[:self.size]) + "]"

    def full(self):
        return self.size >= self.capacity

    def empty(self):
        return self.size == 0

    def push(self, address, caller):
        """push a return address, caller is the address of the CALL for fault reporting"""
        if self.full():
            raise StackOverflow(caller)
        self.addr_list[self.size] = address
        self.size += 1

    def pop(self, caller):
        if self.empty():
            raise StackUnderflow(caller)
        self.size -= 1
        return self.addr_list[self.size]


# ********** WRAPS A BYTEARRAY TO REPRESENT THE MAIN MEMORY WITH A LIMITED SIZE OF 4KB
class Memory:
    def __init__(self, size=MEMORY_SIZE):
        self.inner = bytearray(size)
        self.inner[FONT_BASE:FONT_BASE+len(C8_FONTS)] = bytes(C8_FONTS)

    def __len__(self):
        return len(self.inner)

    def check(self, address, length=1):
        """raise MemoryFault unless [address, address+length) lies inside memory"""
        if address < 0:
            raise MemoryFault(address)
        if address + length > len(self.inner):
            raise MemoryFault(max(address, len(self.inner)))

    def __getitem__(self, index):
        if isinstance(index, slice):
            self.check(index.start, index.stop - index.start)
            return self.inner[index]
        self.check(index)
        return self.inner[index]

    def __setitem__(self, key, value):
        if isinstance(key, slice):
            self.check(key.start, key.stop - key.start)
        else:
            self.check(key)
        self.inner[key] = value

    def load_rom(self, rom):
        """copy a program image at the ROM start address, rejecting it if it doesn't fit"""
        if len(rom) > MAX_PROGRAM_SIZE:
            raise ProgramTooLarge(len(rom), MAX_PROGRAM_SIZE)
        self.inner[ROM_START_ADDRESS:ROM_START_ADDRESS+len(rom)] = bytes(rom)
        log.info("Program of %d bytes loaded at 0x%04x", len(rom), ROM_START_ADDRESS)

    def dump(self):
        return bytes(self.inner)
