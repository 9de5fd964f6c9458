from chip8.config import SCREEN_HEIGHT, SCREEN_WIDTH


class FrameBuffer:
    """
    64x32 grid of binary cells stored row-major in a flat list

    the redraw flag is raised by the engine on every visible change and is only
    lowered by the renderer through acknowledge()
    """
    def __init__(self, w=SCREEN_WIDTH, h=SCREEN_HEIGHT):
        self.w, self.h = w, h
        self.buffer = [0] * h * w
        self.redraw = False

    def __getitem__(self, xy):
        x, y = xy
        return self.buffer[(y % self.h) * self.w + (x % self.w)]

    def clear(self):
        self.buffer = [0] * self.h * self.w
        self.redraw = True

    def flip(self, x, y):
        """XOR the pixel at (x, y) with 1, coordinates wrap around, return True if it was ON"""
        offset = (y % self.h) * self.w + (x % self.w)
        was_on = self.buffer[offset] == 1
        self.buffer[offset] ^= 1
        return was_on

    def snapshot(self):
        """copy of the cells, safe to hand to a renderer between steps"""
        return list(self.buffer)

    def acknowledge(self):
        self.redraw = False

    def rows(self):
        return [self.buffer[y*self.w:(y+1)*self.w] for y in range(self.h)]

    def __str__(self):
        return "\n".join("".join("#" if p else "." for p in row) for row in self.rows())
