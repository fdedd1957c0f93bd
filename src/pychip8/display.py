# -*- coding: utf-8 -*-
"""Monochrome framebuffer of the CHIP-8 virtual machine."""
from typing import Iterable

import numpy as np


WIDTH = 64
HEIGHT = 32


class Framebuffer:
    '''
    64x32 grid of single bit pixels, stored as a (rows, columns) numpy array
    of 0s and 1s. Keeps a flag saying whether anything was drawn since the
    flag was last cleared.
    '''
    def __init__(self, width: int = WIDTH, height: int = HEIGHT) -> None:
        self.width = width
        self.height = height
        self.pixels = np.zeros((height, width), dtype=np.uint8)
        self.changed = False

    def __getitem__(self, coords):
        return self.pixels[coords]

    def clear(self) -> None:
        '''
        Turns every pixel off
        '''
        self.pixels[:, :] = 0
        self.changed = True

    def draw_sprite(self, x: int, y: int, sprite: Iterable[int]) -> bool:
        '''
        XORs a sprite onto the screen with its top left corner at (x, y).
        Each byte of the sprite is one row of 8 pixels, most significant bit
        leftmost. Pixels that fall off an edge wrap around to the other side.

        Returns True if any pixel that was on got turned off.
        '''
        collision = False
        for row, byte in enumerate(sprite):
            py = (y + row) % self.height
            for bit in range(8):
                px = (x + bit) % self.width
                colour = (byte >> (7 - bit)) & 1
                collision |= bool(colour & self.pixels[py, px])
                self.pixels[py, px] ^= colour

        self.changed = True
        return collision

    def snapshot(self) -> np.ndarray:
        '''
        Returns a read-only copy of the current pixels
        '''
        pixels = self.pixels.copy()
        pixels.flags.writeable = False
        return pixels
