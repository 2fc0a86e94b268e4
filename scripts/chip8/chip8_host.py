# HOST
# pygame front end driving the machine core in chip8.py: it owns the window,
# the keyboard mapping, the ROM file and the real time cadence
# (60 frames per second, one timer tick and a batch of instructions per frame).


import argparse
import os
import sys

os.environ["PYGAME_HIDE_SUPPORT_PROMPT"] = "no welcome message"   # this env var disable pygame's welcome message when imported
import pygame
from pygame.locals import (
    K_0, K_1, K_2, K_3,
    K_4, K_5, K_6, K_7,
    K_8, K_9, K_a, K_b,
    K_c, K_d, K_e, K_f,
    K_ESCAPE, K_RETURN, K_TAB,
    KEYDOWN, KEYUP, QUIT,
)

import chip8
from chip8 import Chip8, Chip8Error, ProgramTooLarge, SCREEN_HEIGHT, SCREEN_WIDTH


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

FPS = 60                        # the timers tick once per frame
INSTRUCTIONS_PER_FRAME = 10
SCALE = 15
BLUE = pygame.Color(80, 69, 155, 255)
LIGHT_BLUE = pygame.Color(136, 126, 203, 255)


# ******************** UTILITIES SECTION
def get_args(argv=None):
    parser = argparse.ArgumentParser(description="run a CHIP-8 program")
    parser.add_argument("-f", "--file", required=True, help="input rom file")
    parser.add_argument("--ipf", type=int, default=INSTRUCTIONS_PER_FRAME,
                        help=f"instructions executed per frame, {FPS} frames per second (default: %(default)s)")
    parser.add_argument("--scale", type=int, default=SCALE,
                        help="size in screen pixels of a CHIP-8 pixel (default: %(default)s)")
    args = parser.parse_args(argv)
    if args.ipf < 0:
        parser.error("--ipf must be non-negative")
    if args.scale < 1:
        parser.error("--scale must be at least 1")
    return args


def load_rom(path):
    """read the ROM file at path and return its raw bytes"""
    with open(path, mode='rb') as f:
        rom = f.read()
    if chip8.DEBUG: print(f"The ROM at path {path} has been loaded successfully ({len(rom)} bytes)")
    return rom


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

    def write_pixel(self, x, y):
        pygame.draw.rect(
            self.surface,
            self.foreground,
            (x * self.scale, y * self.scale, self.scale, self.scale)
        )

    def render(self, pixels):
        """paint a row-major framebuffer, any nonzero byte is a lit pixel"""
        self.surface.fill(self.background)
        for offset, pixel in enumerate(pixels):
            if pixel:
                y, x = divmod(offset, self.w)
                self.write_pixel(x, y)
        pygame.display.flip()


def handle_event(chip, event):
    """apply a pygame event to the machine, return False when the user asked to quit"""
    if event.type == QUIT:
        return False
    if event.type == KEYDOWN:
        if event.key == K_ESCAPE:
            return False
        elif event.key == K_TAB:
            chip.reset()
        elif event.key == K_RETURN:
            print(chip.dump_display())
        elif event.key in KEY_MAPPINGS:
            chip.set_key_state(KEY_MAPPINGS[event.key], True)
    elif event.type == KEYUP and event.key in KEY_MAPPINGS:
        chip.set_key_state(KEY_MAPPINGS[event.key], False)
    return True


# ******************** ENTRY POINT SECTION
def main(argv=None):
    args = get_args(argv)
    try:
        chip = Chip8(load_rom(args.file))
    except (OSError, ProgramTooLarge) as err:
        sys.exit(f"Unable to load {args.file}: {err}")
    # pygame initialization
    pygame.init()
    clock = pygame.time.Clock()
    pygame.display.set_caption(os.path.basename(args.file))
    screen = Screen(s=args.scale)
    # emulation loop
    run = True
    try:
        while run:
            clock.tick(FPS)
            for event in pygame.event.get():
                if not handle_event(chip, event):
                    run = False
            chip.advance_timers()
            chip.execute(args.ipf)
            screen.render(chip.read_display())
    except Chip8Error as err:
        sys.exit(f"********** THE EMULATOR CRASHED WITH THE FOLLOWING STATE\n{err}\n{chip}")
    finally:
        pygame.quit()


if __name__ == "__main__":
    main()
