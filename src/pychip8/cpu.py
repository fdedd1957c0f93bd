# -*- coding: utf-8 -*-
"""
Created on Mon Sep  5 18:09:53 2022

@author: SamHill
"""
import enum
import logging
import random
from typing import NamedTuple, Union

import numpy as np

from pychip8.display import Framebuffer
from pychip8.fonts import GLYPH_SIZE
from pychip8.memory import Memory, PROGRAM_ADDRESS


logger = logging.getLogger(__name__)

# Every instruction is two bytes long
OPCODE_SIZE = 2

# Depth of the call stack
STACK_SIZE = 16

NUM_KEYS = 16

# Threshold used by ADD I, Vx when setting VF
INDEX_OVERFLOW = 0x0f00

# Bits of the opcode that identify the instruction, selected by the first
# nibble. Whatever is masked out is an operand.
FAMILY_MASKS = {0x0: 0xffff, 0x1: 0xf000, 0x2: 0xf000, 0x3: 0xf000,
                0x4: 0xf000, 0x5: 0xf00f, 0x6: 0xf000, 0x7: 0xf000,
                0x8: 0xf00f, 0x9: 0xf00f, 0xa: 0xf000, 0xb: 0xf000,
                0xc: 0xf000, 0xd: 0xf000, 0xe: 0xf0ff, 0xf: 0xf0ff}


class Advance(enum.Enum):
    '''
    Number of instructions the program counter moves on by
    '''
    NEXT = 1
    SKIP = 2


class Jump(NamedTuple):
    '''
    Program counter is set to an absolute address
    '''
    address: int


PCChange = Union[Advance, Jump]


def skip_if(condition) -> Advance:
    '''
    Skip the next instruction if condition holds, otherwise carry on
    '''
    return Advance.SKIP if condition else Advance.NEXT


class OutputState(NamedTuple):
    '''
    What the outside world gets to see after each tick
    '''
    vram: np.ndarray
    vram_changed: bool
    beep: bool


class Registers:
    '''
    An object for holding all the information about the CHIP-8 registers,
    including the call stack and both timers.
    '''
    def __init__(self, program_counter=PROGRAM_ADDRESS):
        '''
        Initialise the registers by performing a reset.
        '''
        self.reset(program_counter)

    def __repr__(self):
        '''
        Representation of object, showing content of all registers
        '''
        v = ' '.join(f'{value:02x}' for value in self.v)
        fmt = (f'V: {v} I: 0x{self.i:03x} PC: 0x{self.pc:03x} '
               f'SP: {self.sp} DT: {self.dt} ST: {self.st}')
        return fmt

    def reset(self, program_counter=PROGRAM_ADDRESS):
        '''
        Zero the sixteen V registers, the index register, both timers and the
        stack. Program counter defaults to the program load address.

        V registers and timers are 8 bit, index and program counter 16 bit.
        '''
        self.v = [0] * 16
        self.i = 0
        self.pc = program_counter

        # Return addresses plus pointer to the next free slot
        self.stack = [0] * STACK_SIZE
        self.sp = 0

        # Delay and sound timers
        self.dt = 0
        self.st = 0

    @property
    def vf(self):
        '''
        VF doubles as the carry/borrow/collision flag
        '''
        return self.v[0xf]

    @vf.setter
    def vf(self, value):
        self.v[0xf] = 1 if value else 0

    def push(self, addr):
        '''
        Push return address onto the stack
        '''
        if self.sp >= STACK_SIZE:
            raise StackOverflowError(
                f'Call stack full ({STACK_SIZE} entries) at 0x{self.pc:03x}')
        self.stack[self.sp] = addr
        self.sp += 1

    def pop(self):
        '''
        Pull return address from the stack
        '''
        if self.sp == 0:
            raise StackUnderflowError(
                f'Return with empty call stack at 0x{self.pc:03x}')
        self.sp -= 1
        return self.stack[self.sp]


class Processor:
    '''
    Interpreter for the CHIP-8 virtual machine
    '''
    def __init__(self, memory=None, rng=None, program_counter=PROGRAM_ADDRESS):
        '''
        Initialise the interpreter. Memory is created with the font already in
        place if not given; the program still needs to be loaded.

        rng supplies the random bytes for RND. Anything with a randrange method
        like random.Random will do, which lets tests pass a seeded generator.
        '''
        self.memory = memory if memory is not None else Memory()
        self.rng = rng if rng is not None else random.Random()

        self.r = Registers(program_counter)
        self.display = Framebuffer()

        # Keypad as last reported by the host, and the FX0A latch
        self.keypad = [False] * NUM_KEYS
        self.keypad_waiting = False
        self.keypad_register = 0

        # Dictionary holding each instruction, keyed by the opcode with its
        # operands masked out. Value for each key is a 3-tuple of
        # (name string, function to call, operand decoder)
        self._ops = {# 0 - System
                     0x00e0: ('CLS', self.CLS, self._implied),
                     0x00ee: ('RET', self.RET, self._implied),
                     # 1, 2 - Jump and call
                     0x1000: ('JP', self.JP, self._addr),
                     0x2000: ('CALL', self.CALL, self._addr),
                     # 3, 4, 5, 9 - Conditional skips
                     0x3000: ('SE Vx,byte', self.SE_byte, self._reg_byte),
                     0x4000: ('SNE Vx,byte', self.SNE_byte, self._reg_byte),
                     0x5000: ('SE Vx,Vy', self.SE_reg, self._reg_reg),
                     0x9000: ('SNE Vx,Vy', self.SNE_reg, self._reg_reg),
                     # 6, 7 - Immediate loads and adds
                     0x6000: ('LD Vx,byte', self.LD_byte, self._reg_byte),
                     0x7000: ('ADD Vx,byte', self.ADD_byte, self._reg_byte),
                     # 8 - Register to register arithmetic
                     0x8000: ('LD Vx,Vy', self.LD_reg, self._reg_reg),
                     0x8001: ('OR Vx,Vy', self.OR, self._reg_reg),
                     0x8002: ('AND Vx,Vy', self.AND, self._reg_reg),
                     0x8003: ('XOR Vx,Vy', self.XOR, self._reg_reg),
                     0x8004: ('ADD Vx,Vy', self.ADD_reg, self._reg_reg),
                     0x8005: ('SUB Vx,Vy', self.SUB, self._reg_reg),
                     0x8006: ('SHR Vx', self.SHR, self._reg),
                     0x8007: ('SUBN Vx,Vy', self.SUBN, self._reg_reg),
                     0x800e: ('SHL Vx', self.SHL, self._reg),
                     # A, B, C - Index, offset jump and random
                     0xa000: ('LD I,addr', self.LD_I, self._addr),
                     0xb000: ('JP V0,addr', self.JP_V0, self._addr),
                     0xc000: ('RND Vx,byte', self.RND, self._reg_byte),
                     # D - Draw
                     0xd000: ('DRW Vx,Vy,n', self.DRW, self._reg_reg_nibble),
                     # E - Keypad skips
                     0xe09e: ('SKP Vx', self.SKP, self._reg),
                     0xe0a1: ('SKNP Vx', self.SKNP, self._reg),
                     # F - Timers, keypad wait and index operations
                     0xf007: ('LD Vx,DT', self.LD_Vx_DT, self._reg),
                     0xf00a: ('LD Vx,K', self.LD_K, self._reg),
                     0xf015: ('LD DT,Vx', self.LD_DT, self._reg),
                     0xf018: ('LD ST,Vx', self.LD_ST, self._reg),
                     0xf01e: ('ADD I,Vx', self.ADD_I, self._reg),
                     0xf029: ('LD F,Vx', self.LD_F, self._reg),
                     0xf033: ('LD B,Vx', self.LD_B, self._reg),
                     0xf055: ('LD [I],Vx', self.LD_store, self._reg),
                     0xf065: ('LD Vx,[I]', self.LD_load, self._reg),
                     }

    def load_rom(self, filename):
        '''
        Read a program image from file into memory at the load address
        '''
        with open(filename, 'rb') as fi:
            instructions = fi.read()

        logger.info('Loading %s (%d bytes)', filename, len(instructions))
        self.load_bytes(instructions)

    def load_bytes(self, data, start_addr=PROGRAM_ADDRESS):
        '''
        Copy a program image into memory
        '''
        self.memory.load(data, start_addr)

    def tick(self, keypad):
        '''
        Advance the machine by one time step. If waiting for a key (FX0A), the
        only thing that happens is checking for a key press. Otherwise both
        timers count down and one instruction is executed.
        '''
        if len(keypad) != NUM_KEYS:
            raise ValueError(
                f'Expected {NUM_KEYS} key states, got {len(keypad)}')

        self.keypad = [bool(k) for k in keypad]
        self.display.changed = False

        if self.keypad_waiting:
            for key, pressed in enumerate(self.keypad):
                if pressed:
                    self.keypad_waiting = False
                    self.r.v[self.keypad_register] = key
                    break
        else:
            if self.r.dt > 0:
                self.r.dt -= 1
            if self.r.st > 0:
                self.r.st -= 1
            self.step()

        return OutputState(vram=self.display.snapshot(),
                           vram_changed=self.display.changed,
                           beep=self.r.st > 0)

    def fetch(self):
        '''
        Read the big-endian instruction word the program counter points at
        '''
        return self.memory.read_word(self.r.pc)

    def decode(self, opcode):
        '''
        Look up the instruction for an opcode. Returns a 3-tuple of (name,
        function, operand decoder) or None if the opcode is not recognised.
        '''
        key = opcode & FAMILY_MASKS[opcode >> 12]
        return self._ops.get(key)

    def step(self):
        '''
        Steps through to the next instruction - fetches it from memory, decodes
        instruction and executes.
        '''
        # Fetch instruction
        opcode = self.fetch()

        # Decode instruction
        op = self.decode(opcode)
        if op is None:
            # Unknown opcodes (or data) are skipped over
            logger.debug('%03x\t%04x\tunknown opcode', self.r.pc, opcode)
            change = Advance.NEXT
        else:
            name, instruction, operands = op
            arguments = operands(opcode)
            logger.debug('%03x\t%04x\t%s\t%s', self.r.pc, opcode, name,
                         arguments)

            # Execute
            change = instruction(*arguments)

        if isinstance(change, Jump):
            self.r.pc = change.address
        else:
            self.r.pc += change.value * OPCODE_SIZE

    ######## Operand decoding ########
    def _implied(self, opcode):
        '''
        No operands
        '''
        return ()

    def _addr(self, opcode):
        '''
        nnn: 12-bit address in the low bits
        '''
        return (opcode & 0x0fff,)

    def _reg(self, opcode):
        '''
        x: register index in the second nibble
        '''
        return ((opcode >> 8) & 0xf,)

    def _reg_byte(self, opcode):
        '''
        x and kk: register index and 8-bit immediate
        '''
        return ((opcode >> 8) & 0xf, opcode & 0xff)

    def _reg_reg(self, opcode):
        '''
        x and y: two register indices
        '''
        return ((opcode >> 8) & 0xf, (opcode >> 4) & 0xf)

    def _reg_reg_nibble(self, opcode):
        '''
        x, y and n: two register indices and a 4-bit count
        '''
        return ((opcode >> 8) & 0xf, (opcode >> 4) & 0xf, opcode & 0xf)

    ######## Instructions ########
    def CLS(self) -> PCChange:
        '''
        Clear the display
        '''
        self.display.clear()
        return Advance.NEXT

    def RET(self) -> PCChange:
        '''
        Return from subroutine
        '''
        return Jump(self.r.pop())

    def JP(self, addr) -> PCChange:
        '''
        Jump to address
        '''
        return Jump(addr)

    def CALL(self, addr) -> PCChange:
        '''
        Call subroutine at address. Return address is the instruction after
        the call.
        '''
        self.r.push(self.r.pc + OPCODE_SIZE)
        return Jump(addr)

    def SE_byte(self, x, kk) -> PCChange:
        '''
        Skip next instruction if Vx == kk
        '''
        return skip_if(self.r.v[x] == kk)

    def SNE_byte(self, x, kk) -> PCChange:
        '''
        Skip next instruction if Vx != kk
        '''
        return skip_if(self.r.v[x] != kk)

    def SE_reg(self, x, y) -> PCChange:
        '''
        Skip next instruction if Vx == Vy
        '''
        return skip_if(self.r.v[x] == self.r.v[y])

    def SNE_reg(self, x, y) -> PCChange:
        '''
        Skip next instruction if Vx != Vy
        '''
        return skip_if(self.r.v[x] != self.r.v[y])

    def LD_byte(self, x, kk) -> PCChange:
        self.r.v[x] = kk
        return Advance.NEXT

    def ADD_byte(self, x, kk) -> PCChange:
        '''
        Add immediate to Vx. Wraps around, VF is left alone.
        '''
        self.r.v[x] = (self.r.v[x] + kk) & 0xff
        return Advance.NEXT

    def LD_reg(self, x, y) -> PCChange:
        self.r.v[x] = self.r.v[y]
        return Advance.NEXT

    def OR(self, x, y) -> PCChange:
        self.r.v[x] |= self.r.v[y]
        return Advance.NEXT

    def AND(self, x, y) -> PCChange:
        self.r.v[x] &= self.r.v[y]
        return Advance.NEXT

    def XOR(self, x, y) -> PCChange:
        self.r.v[x] ^= self.r.v[y]
        return Advance.NEXT

    def ADD_reg(self, x, y) -> PCChange:
        '''
        Vx = Vx + Vy, VF set to the carry
        '''
        result = self.r.v[x] + self.r.v[y]
        self.r.v[x] = result & 0xff
        self.r.vf = result > 0xff
        return Advance.NEXT

    def SUB(self, x, y) -> PCChange:
        '''
        Vx = Vx - Vy, VF set to 1 if Vx > Vy (no borrow)
        '''
        vx, vy = self.r.v[x], self.r.v[y]
        self.r.vf = vx > vy
        self.r.v[x] = (vx - vy) & 0xff
        return Advance.NEXT

    def SHR(self, x) -> PCChange:
        '''
        Shift Vx right by one, least significant bit goes into VF
        '''
        vx = self.r.v[x]
        self.r.vf = vx & 0x01
        self.r.v[x] = vx >> 1
        return Advance.NEXT

    def SUBN(self, x, y) -> PCChange:
        '''
        Vx = Vy - Vx, VF set to 1 if Vy > Vx (no borrow)
        '''
        vx, vy = self.r.v[x], self.r.v[y]
        self.r.vf = vy > vx
        self.r.v[x] = (vy - vx) & 0xff
        return Advance.NEXT

    def SHL(self, x) -> PCChange:
        '''
        Shift Vx left by one, most significant bit goes into VF
        '''
        vx = self.r.v[x]
        self.r.vf = vx & 0x80
        self.r.v[x] = (vx << 1) & 0xff
        return Advance.NEXT

    def LD_I(self, addr) -> PCChange:
        self.r.i = addr
        return Advance.NEXT

    def JP_V0(self, addr) -> PCChange:
        '''
        Jump to address plus V0
        '''
        return Jump(addr + self.r.v[0])

    def RND(self, x, kk) -> PCChange:
        '''
        Vx = random byte AND kk
        '''
        self.r.v[x] = self.rng.randrange(256) & kk
        return Advance.NEXT

    def DRW(self, x, y, n) -> PCChange:
        '''
        Draw the n byte sprite stored at I at (Vx, Vy). VF is set if any lit
        pixel gets erased.
        '''
        sprite = [self.memory.read(self.r.i + row) for row in range(n)]
        self.r.vf = self.display.draw_sprite(self.r.v[x], self.r.v[y], sprite)
        return Advance.NEXT

    def SKP(self, x) -> PCChange:
        '''
        Skip next instruction if the key in Vx is pressed
        '''
        return skip_if(self.keypad[self.r.v[x] & 0xf])

    def SKNP(self, x) -> PCChange:
        '''
        Skip next instruction if the key in Vx is not pressed
        '''
        return skip_if(not self.keypad[self.r.v[x] & 0xf])

    def LD_Vx_DT(self, x) -> PCChange:
        self.r.v[x] = self.r.dt
        return Advance.NEXT

    def LD_K(self, x) -> PCChange:
        '''
        Wait for a key press and store it in Vx. The wait itself is handled
        by tick.
        '''
        self.keypad_waiting = True
        self.keypad_register = x
        return Advance.NEXT

    def LD_DT(self, x) -> PCChange:
        self.r.dt = self.r.v[x]
        return Advance.NEXT

    def LD_ST(self, x) -> PCChange:
        self.r.st = self.r.v[x]
        return Advance.NEXT

    def ADD_I(self, x) -> PCChange:
        '''
        I = I + Vx. VF is set when I goes past 0xF00, which is what older
        interpreters did rather than a real overflow check.
        '''
        self.r.i = (self.r.i + self.r.v[x]) & 0xffff
        self.r.vf = self.r.i > INDEX_OVERFLOW
        return Advance.NEXT

    def LD_F(self, x) -> PCChange:
        '''
        Point I at the glyph for the digit in Vx
        '''
        self.r.i = self.r.v[x] * GLYPH_SIZE
        return Advance.NEXT

    def LD_B(self, x) -> PCChange:
        '''
        Store BCD representation of Vx at I, I+1 and I+2
        '''
        value = self.r.v[x]
        self.memory.check_range(self.r.i, 3)
        self.memory.write(self.r.i, value // 100)
        self.memory.write(self.r.i + 1, (value % 100) // 10)
        self.memory.write(self.r.i + 2, value % 10)
        return Advance.NEXT

    def LD_store(self, x) -> PCChange:
        '''
        Store V0 to Vx (inclusive) in memory starting at I
        '''
        self.memory.check_range(self.r.i, x + 1)
        for reg in range(x + 1):
            self.memory.write(self.r.i + reg, self.r.v[reg])
        return Advance.NEXT

    def LD_load(self, x) -> PCChange:
        '''
        Read V0 to Vx (inclusive) from memory starting at I
        '''
        values = [self.memory.read(self.r.i + reg) for reg in range(x + 1)]
        self.r.v[:x + 1] = values
        return Advance.NEXT


class StackFault(RuntimeError):
    pass


class StackOverflowError(StackFault):
    pass


class StackUnderflowError(StackFault):
    pass
