import random


class RandomSource:
    """random byte source backed by the random module, seedable for replays"""
    def __init__(self, seed=None):
        self._random = random.Random(seed)

    def next_byte(self):
        return self._random.randint(0, 255)


class FixedSequence:
    """deterministic byte source cycling through a fixed sequence"""
    def __init__(self, values):
        if not values:
            raise ValueError("FixedSequence needs at least one value")
        self.values = [v & 0xFF for v in values]
        self.position = 0

    def next_byte(self):
        value = self.values[self.position % len(self.values)]
        self.position += 1
        return value
