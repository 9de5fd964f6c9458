from collections import namedtuple

from chip8.errors import InvalidInstruction


# decoded form of an instruction word, name selects the handler
Instruction = namedtuple("Instruction", ["name", "word", "x", "y", "n", "nn", "nnn"])


PATTERNS = {
    0x00E0: "CLS",
    0x00EE: "RET",
    0x1000: "JP",
    0x2000: "CALL",
    0x3000: "SE_VX_NN",
    0x4000: "SNE_VX_NN",
    0x5000: "SE_VX_VY",
    0x6000: "LD_VX_NN",
    0x7000: "ADD_VX_NN",
    0x8000: "LD_VX_VY",
    0x8001: "OR",
    0x8002: "AND",
    0x8003: "XOR",
    0x8004: "ADD_VX_VY",
    0x8005: "SUB",
    0x8006: "SHR",
    0x8007: "SUBN",
    0x800E: "SHL",
    0x9000: "SNE_VX_VY",
    0xA000: "LD_I",
    0xB000: "JP_V0",
    0xC000: "RND",
    0xD000: "DRW",
    0xE09E: "SKP",
    0xE0A1: "SKNP",
    0xF007: "LD_VX_DT",
    0xF00A: "LD_VX_K",
    0xF015: "LD_DT_VX",
    0xF018: "LD_ST_VX",
    0xF01E: "ADD_I_VX",
    0xF029: "LD_F_VX",
    0xF033: "LD_B_VX",
    0xF055: "LD_MEM_VX",
    0xF065: "LD_VX_MEM",
}

# WATCH OUT: masks order is important!!!
# the loop in decode stops at the first mask yielding a known pattern
MASKS = {
    0xF0FF: [0xE09E, 0xE0A1, 0xF007, 0xF00A, 0xF015, 0xF018, 0xF01E, 0xF029, 0xF033, 0xF055, 0xF065],
    0xF00F: [0x5000, 0x8000, 0x8001, 0x8002, 0x8003, 0x8004, 0x8005, 0x8006, 0x8007, 0x800E, 0x9000],
    0xF000: [0x1000, 0x2000, 0x3000, 0x4000, 0x6000, 0x7000, 0xA000, 0xB000, 0xC000, 0xD000],
    0xFFFF: [0x00E0, 0x00EE],
}


def fields(word):
    """split an instruction word in its nibble aligned fields"""
    return {
        'x': (word & 0x0F00) >> 8,
        'y': (word & 0x00F0) >> 4,
        'n': word & 0x000F,
        'nn': word & 0x00FF,
        'nnn': word & 0x0FFF,
    }


def decode(word, address=None):
    """decode an instruction word using masks, raise InvalidInstruction if nothing matches"""
    word &= 0xFFFF
    for mask, patterns in MASKS.items():
        if (word & mask) in patterns:
            return Instruction(PATTERNS[word & mask], word, **fields(word))
    raise InvalidInstruction(word, address)
