# -*- coding: utf-8 -*-
"""
Draws the CHIP-8 framebuffer into a terminal using ANSI escape sequences,
one character cell per pixel.
"""
import sys

ESC = '\x1b['
CLEAR = ESC + '2J'
HIDE_CURSOR = ESC + '?25l'
SHOW_CURSOR = ESC + '?25h'
GREEN = ESC + '32m'
RESET = ESC + '0m'

PIXEL_ON = GREEN + '█' + RESET
PIXEL_OFF = ' '


def move_to(x, y):
    '''
    Escape sequence to move the cursor to column x, row y (zero based)
    '''
    return f'{ESC}{y + 1};{x + 1}H'


class ConsoleDisplay:
    '''
    Renders framebuffer snapshots to a text stream
    '''
    def __init__(self, stream=None):
        self.stream = stream if stream is not None else sys.stdout
        self.prepare()

    def prepare(self):
        '''
        Clear the terminal and hide the cursor
        '''
        self.stream.write(CLEAR + HIDE_CURSOR)
        self.stream.flush()

    def draw(self, pixels):
        '''
        Draw a (rows, columns) grid of 0/1 pixels from the top left corner
        '''
        out = []
        for y, row in enumerate(pixels):
            out.append(move_to(0, y))
            out.extend(PIXEL_ON if col else PIXEL_OFF for col in row)
        self.stream.write(''.join(out))
        self.stream.flush()

    def close(self):
        '''
        Put the terminal back how we found it
        '''
        self.stream.write(RESET + SHOW_CURSOR + '\n')
        self.stream.flush()
