import argparse
import logging
import sys

from chip8.config import DEBUG, INSTRUCTIONS_PER_SECOND, TIMER_HZ
from chip8.cpu import Chip8, Quirks
from chip8.errors import ProgramTooLarge
from chip8.rng import RandomSource

log = logging.getLogger("chip8")


# ******************** UTILITIES SECTION
def get_args(argv=None):
    parser = argparse.ArgumentParser(prog="chip8", description="CHIP-8 virtual machine")
    parser.add_argument("-f", "--file", required=True, help="input rom file")
    parser.add_argument("--ips", type=int, default=INSTRUCTIONS_PER_SECOND,
                        help="instructions executed per second (default: %(default)s)")
    parser.add_argument("--scale", type=int, default=None, help="size in pixels of a CHIP-8 pixel")
    parser.add_argument("--seed", type=int, default=None, help="seed for the RND instruction")
    parser.add_argument("--keep-index", action="store_true",
                        help="leave I unmodified after LD [I], Vx and LD Vx, [I]")
    parser.add_argument("--shift-vy", action="store_true",
                        help="SHR/SHL shift Vy into Vx instead of Vx in place")
    parser.add_argument("--debug", action="store_true", default=DEBUG,
                        help="enable verbose debug logging (also DEBUG=1)")
    return parser.parse_args(argv)


def read_rom(path):
    with open(path, mode='rb') as f:
        return f.read()


def build_chip(args):
    quirks = Quirks(load_store_advances_index=not args.keep_index, shift_reads_vy=args.shift_vy)
    return Chip8(rng=RandomSource(args.seed), instructions_per_second=args.ips, quirks=quirks)


# ******************** ENTRY POINT SECTION
def main(argv=None):
    args = get_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.debug else logging.INFO,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    chip = build_chip(args)
    try:
        chip.load(read_rom(args.file))
    except (OSError, ProgramTooLarge) as e:
        log.error("Cannot load %s: %s", args.file, e)
        return 1
    log.info("The ROM at path %s has been loaded successfully", args.file)

    # pygame is only needed once there is something to show
    import pygame
    from chip8.screen import SCALE, Keypad, Screen

    pygame.init()
    pygame.display.set_caption(args.file.split('/')[-1])
    clock = pygame.time.Clock()
    screen = Screen(s=args.scale or SCALE)
    keypad = Keypad()
    chip.on_tone = lambda: log.info("BEEP")

    # emulation loop
    status = 0
    run = True
    try:
        while run:
            elapsed = clock.tick(TIMER_HZ) / 1000
            # process user input
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    run = False
                elif event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                    run = False
                else:
                    keypad.dispatch(event, chip)
            fault = chip.step(elapsed)
            if fault is not None:
                log.error("********** THE EMULATOR CRASHED WITH THE FOLLOWING STATE\n%s", chip)
                status = 2
                run = False
            if chip.framebuffer.redraw:
                screen.render(chip.framebuffer.snapshot())
                chip.framebuffer.acknowledge()
                screen.refresh()
    except KeyboardInterrupt:
        log.info("Goodbye!")
    finally:
        pygame.quit()
    return status


if __name__ == "__main__":
    sys.exit(main())
