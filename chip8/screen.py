import os
os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "no welcome message")   # this env var disable pygame's welcome message when imported
import pygame
from pygame.locals import (
    K_0, K_1, K_2, K_3,
    K_4, K_5, K_6, K_7,
    K_8, K_9, K_a, K_b,
    K_c, K_d, K_e, K_f,
    KEYDOWN, KEYUP,
)

from chip8.config import SCREEN_HEIGHT, SCREEN_WIDTH


# ******************** STATIC SECTION
KEY_MAPPINGS = {
    K_0: 0x0,
    K_1: 0x1,
    K_2: 0x2,
    K_3: 0x3,
    K_4: 0x4,
    K_5: 0x5,
    K_6: 0x6,
    K_7: 0x7,
    K_8: 0x8,
    K_9: 0x9,
    K_a: 0xA,
    K_b: 0xB,
    K_c: 0xC,
    K_d: 0xD,
    K_e: 0xE,
    K_f: 0xF,
}

SCALE = 15
BLUE = pygame.Color(80, 69, 155, 255)
LIGHT_BLUE = pygame.Color(136, 126, 203, 255)


# ******************** I/O SECTION
class Screen:
    def __init__(self, w=SCREEN_WIDTH, h=SCREEN_HEIGHT, s=SCALE, bg_color=BLUE, fg_color=LIGHT_BLUE):
        self.w, self.h, self.scale = w, h, s
        self.background = bg_color
        self.foreground = fg_color
        self.surface = pygame.display.set_mode(
            (w * self.scale, h * self.scale),
        )
        self.surface.fill(self.background)

    def read_pixel(self, x, y):
        """return 1 if pixel is ON, return 0 if pixel is OFF"""
        p = self.surface.get_at((x * self.scale, y * self.scale))
        return 0 if p == self.background else 1

    def write_pixel(self, x, y, color):
        """
        set a pixel on the screen, being it a foreground pixel or a background one
        the change won't be immediatly visible because it'll require a call to refresh
        """
        pygame.draw.rect(
            self.surface,
            self.background if color == 0 else self.foreground,
            (x * self.scale, y * self.scale, self.scale, self.scale)
        )

    def render(self, cells):
        """paint a row-major snapshot of the frame buffer"""
        self.surface.fill(self.background)
        for offset, cell in enumerate(cells):
            if cell:
                self.write_pixel(offset % self.w, offset // self.w, 1)

    @staticmethod
    def refresh():
        pygame.display.flip()


class Keypad:
    """translates pygame key events into 4-bit key ids"""
    def __init__(self, mappings=None):
        self.mappings = dict(KEY_MAPPINGS if mappings is None else mappings)
        for key_id in self.mappings.values():
            if not 0x0 <= key_id <= 0xF:
                raise ValueError(f"Key id must be in 0x0..0xF, got {key_id!r}")

    def __getitem__(self, key):
        """key id bound to a pygame key, None if unbound"""
        return self.mappings.get(key)

    def dispatch(self, event, chip):
        """forward a KEYDOWN/KEYUP event to the machine, return True if it was consumed"""
        if event.type not in (KEYDOWN, KEYUP):
            return False
        key_id = self[event.key]
        if key_id is None:
            return False
        if event.type == KEYDOWN:
            chip.key_down(key_id)
        else:
            chip.key_up(key_id)
        return True
