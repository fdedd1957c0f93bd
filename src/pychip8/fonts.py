# -*- coding: utf-8 -*-
"""
Built-in hexadecimal font. Each glyph is 5 rows of 4 pixels, stored in the
high nibble of each byte.
"""

# Address the glyph table is copied to when memory is created
FONT_ADDRESS = 0x050

# Number of bytes per glyph
GLYPH_SIZE = 5

FONTSET = bytes([
    0xf0, 0x90, 0x90, 0x90, 0xf0,   # 0
    0x20, 0x60, 0x20, 0x20, 0x70,   # 1
    0xf0, 0x10, 0xf0, 0x80, 0xf0,   # 2
    0xf0, 0x10, 0xf0, 0x10, 0xf0,   # 3
    0x90, 0x90, 0xf0, 0x10, 0x10,   # 4
    0xf0, 0x80, 0xf0, 0x10, 0xf0,   # 5
    0xf0, 0x80, 0xf0, 0x90, 0xf0,   # 6
    0xf0, 0x10, 0x20, 0x40, 0x40,   # 7
    0xf0, 0x90, 0xf0, 0x90, 0xf0,   # 8
    0xf0, 0x90, 0xf0, 0x10, 0xf0,   # 9
    0xf0, 0x90, 0xf0, 0x90, 0x90,   # A
    0xe0, 0x90, 0xe0, 0x90, 0xe0,   # B
    0xf0, 0x80, 0x80, 0x80, 0xf0,   # C
    0xe0, 0x90, 0x90, 0x90, 0xe0,   # D
    0xf0, 0x80, 0xf0, 0x80, 0xf0,   # E
    0xf0, 0x80, 0xf0, 0x80, 0x80,   # F
])
