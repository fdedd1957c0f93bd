# -*- coding: utf-8 -*-
"""
Created on Tue Sep  6 16:56:29 2022

@author: SamHill
"""
import array
import logging
from typing import Union

from pychip8.fonts import FONTSET, FONT_ADDRESS


logger = logging.getLogger(__name__)

# Total addressable memory of the virtual machine
MEMORY_SIZE = 0x1000

# Programs are always loaded (and started) from here
PROGRAM_ADDRESS = 0x200

block_type = tuple[int, int, str, Union[None, bytes]]


class Memory:
    '''
    The 4k of memory that the CHIP-8 interpreter can address. The bottom
    512 bytes belong to the interpreter (and hold the font), everything from
    $200 upwards is free for the program.
    '''
    def __init__(self, blocks: Union[None, tuple[block_type, ...]] = None) -> None:
        '''
        Initialise the memory and lay out the named blocks. If no blocks are
        given, the standard CHIP-8 layout is used with the font copied in.
        '''
        # Whole address space, all zero to start with
        self.memory = array.array('B', MEMORY_SIZE*[0])

        # Keep track of memory blocks
        self.blocks = []

        if blocks is None:
            blocks = ((0x000, FONT_ADDRESS, 'Reserved', None),
                      (FONT_ADDRESS, len(FONTSET), 'Font', FONTSET),
                      (FONT_ADDRESS + len(FONTSET),
                       PROGRAM_ADDRESS - FONT_ADDRESS - len(FONTSET),
                       'Reserved', None),
                      (PROGRAM_ADDRESS, MEMORY_SIZE - PROGRAM_ADDRESS,
                       'Program', None))

        for b in blocks:
            self.add_block(*b)

    def __len__(self) -> int:
        return len(self.memory)

    def add_block(self, start_addr: int, length: int, name: str,
                  data: Union[None, bytes] = None) -> None:
        '''
        Add a named block of memory.
        Inputs:
            start_addr      -   Start address of memory block
            length          -   Number of bytes of memory block
            name            -   Human readable name for the block
            data            -   data to initialise datablock to.
        '''
        end = start_addr + length
        if start_addr < 0 or end > MEMORY_SIZE:
            raise MemoryRangeError(
                f'Block {name} (0x{start_addr:03x}-0x{end:03x}) lies outside '
                f'of memory')

        # Blocks may touch, but must not overlap
        for block in self.blocks:
            block_end = block['start'] + block['length']
            if start_addr < block_end and block['start'] < end:
                raise MemoryRangeError(
                    f'Block {name} overlaps existing block {block["name"]}')

        new_mem = {'start': start_addr, 'length': length, 'name': name}

        if data:
            self.memory[start_addr:start_addr + len(data)] = array.array('B', data)

        self.blocks.append(new_mem)

    def check_range(self, start_addr: int, length: int) -> None:
        '''
        Raises AddressError unless every address from start_addr to
        start_addr + length - 1 is in memory
        '''
        self._check(start_addr)
        self._check(start_addr + length - 1)

    def load(self, data: bytes, start_addr: int = PROGRAM_ADDRESS) -> None:
        '''
        Copies a program image byte for byte into memory, starting at
        start_addr.
        '''
        end = start_addr + len(data)
        if end > MEMORY_SIZE:
            raise MemoryRangeError(
                f'Image of {len(data)} bytes does not fit at 0x{start_addr:03x}')

        self.memory[start_addr:end] = array.array('B', data)
        logger.info('Loaded %d bytes at 0x%03x', len(data), start_addr)

    def read(self, addr: int) -> int:
        '''
        Reads byte of data from address addr
        '''
        self._check(addr)
        return self.memory[addr]

    def read_word(self, addr: int) -> int:
        '''
        Reads a big-endian 16-bit word starting at addr
        '''
        return (self.read(addr) << 8) | self.read(addr + 1)

    def write(self, addr: int, value: int) -> None:
        '''
        Writes value of data to address.
        '''
        self._check(addr)
        self.memory[addr] = value & 0xff

    def _check(self, addr: int) -> None:
        if not 0 <= addr < MEMORY_SIZE:
            raise AddressError(f'Address 0x{addr:04x} is outside of memory')


class MemoryRangeError(ValueError):
    pass


class AddressError(IndexError):
    pass
