from chip8.cpu import Chip8, Quirks
from chip8.errors import (
    Chip8Error,
    InvalidInstruction,
    MemoryFault,
    ProgramTooLarge,
    StackOverflow,
    StackUnderflow,
)
from chip8.framebuffer import FrameBuffer
from chip8.opcodes import Instruction, decode
from chip8.rng import FixedSequence, RandomSource

__all__ = [
    "Chip8",
    "Quirks",
    "Chip8Error",
    "InvalidInstruction",
    "MemoryFault",
    "ProgramTooLarge",
    "StackOverflow",
    "StackUnderflow",
    "FrameBuffer",
    "Instruction",
    "decode",
    "FixedSequence",
    "RandomSource",
]
