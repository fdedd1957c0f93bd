# -*- coding: utf-8 -*-
"""
Host loop for the interpreter: loads a ROM, ticks the processor at a fixed
rate and redraws the terminal whenever the screen changes.

Usage:
    pychip8 roms/PONG --tick-rate 2
"""
import argparse
import logging
import sys
import time

from pychip8.console import ConsoleDisplay
from pychip8.cpu import Processor, NUM_KEYS, StackFault
from pychip8.memory import AddressError, MemoryRangeError


logger = logging.getLogger(__name__)


class Emulator:
    '''
    Ties a Processor to a ConsoleDisplay
    '''
    def __init__(self, processor=None, display=None, sleep=time.sleep):
        self.processor = processor if processor is not None else Processor()
        self.display = display
        self._sleep = sleep

    def run(self, rom, tick_rate=2, max_ticks=None):
        '''
        Load rom and run it, one tick every tick_rate milliseconds. Runs
        forever unless max_ticks is given. No keyboard is attached, so every
        key is always reported as released.
        '''
        self.processor.load_rom(rom)

        if self.display is None:
            self.display = ConsoleDisplay()

        keypad = [False] * NUM_KEYS
        beeping = False
        ticks = 0
        try:
            while max_ticks is None or ticks < max_ticks:
                output = self.processor.tick(keypad)

                if output.vram_changed:
                    self.display.draw(output.vram)

                if output.beep != beeping:
                    beeping = output.beep
                    logger.debug('Beep %s', 'on' if beeping else 'off')

                ticks += 1
                self._sleep(tick_rate / 1000)
        finally:
            self.display.close()

        return ticks


parser = argparse.ArgumentParser(
    description='Run a CHIP-8 program in the terminal.')
parser.add_argument(
    'rom', help='Path to the program image.')
parser.add_argument(
    '--tick-rate', type=int, default=2,
    help='Milliseconds between ticks.')
parser.add_argument(
    '--max-ticks', type=int, default=None,
    help='Stop after this many ticks (default: run forever).')
parser.add_argument(
    '-v', '--verbose', action='store_true',
    help='Log every instruction executed.')


def main(argv=None):
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    emulator = Emulator()
    try:
        emulator.run(args.rom, tick_rate=args.tick_rate,
                     max_ticks=args.max_ticks)
    except OSError as e:
        logger.error('Could not load %s: %s', args.rom, e)
        return 1
    except (MemoryRangeError, AddressError, StackFault) as e:
        logger.error('%s (%r)', e, emulator.processor.r)
        return 2
    except KeyboardInterrupt:
        pass

    return 0


if __name__ == '__main__':
    sys.exit(main())
