import os


# ******************** MACHINE SECTION
MEMORY_SIZE = 4096
ROM_START_ADDRESS = 0x200
MAX_PROGRAM_SIZE = MEMORY_SIZE - ROM_START_ADDRESS
FONT_BASE = 0x000
FONT_GLYPH_SIZE = 5     # each character font is made of 5 bytes
STACK_SIZE = 16
REGISTER_COUNT = 16
KEY_COUNT = 16
SCREEN_WIDTH = 64
SCREEN_HEIGHT = 32


# ******************** TIMING SECTION
TIMER_HZ = 60
INSTRUCTIONS_PER_SECOND = int(os.getenv('CHIP8_IPS', 600))


# ******************** DIAGNOSTICS SECTION
DEBUG = True if int(os.getenv('DEBUG', 0)) >= 1 else False
