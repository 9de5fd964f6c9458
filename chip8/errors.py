class Chip8Error(Exception):
    """base class for every fault the machine can report"""


class InvalidInstruction(Chip8Error):
    def __init__(self, word, address=None):
        self.word = word
        self.address = address
        where = f" at 0x{address:04x}" if address is not None else ""
        super().__init__(f"Invalid instruction 0x{word:04x}{where}")


class StackOverflow(Chip8Error):
    def __init__(self, address):
        self.address = address
        super().__init__(f"The CHIP-8 stack can contain at most 16 addresses. Call at 0x{address:04x} exceeded it")


class StackUnderflow(Chip8Error):
    def __init__(self, address):
        self.address = address
        super().__init__(f"Return at 0x{address:04x} has nowhere to go")


class MemoryFault(Chip8Error):
    def __init__(self, address):
        self.address = address
        super().__init__(f"Memory access out of range: 0x{address:04x}")


class ProgramTooLarge(Chip8Error):
    def __init__(self, size, limit):
        self.size = size
        self.limit = limit
        super().__init__(f"Program is too large: {size} bytes, at most {limit} fit in memory")
