"""Headless command-line runner: load a ROM, run it, print the display."""

import argparse
import sys
from typing import List, Optional

from chipvm.config import Quirks
from chipvm.logging import MachineLogger
from chipvm.machine import Machine
from chipvm.rendering import vram_to_text


def _parse_keys(value: str) -> List[int]:
    if not value:
        return []
    try:
        keys = [int(key, 16) for key in value.split(",")]
    except ValueError:
        raise argparse.ArgumentTypeError(f"Keys must be hex digits separated by commas, got '{value}'")
    if any(not 0 <= key < 16 for key in keys):
        raise argparse.ArgumentTypeError(f"Keys must be in 0..F, got '{value}'")
    return keys


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="chipvm", description="Run a CHIP-8 program headless")
    parser.add_argument("rom", type=str, help="Raw program image, loaded at 0x200")
    parser.add_argument(
        "--cycles", type=int, default=600, help="Number of cycles to run (default: 600)"
    )
    parser.add_argument(
        "--quirks",
        type=str,
        default="default",
        choices=["default", "reference", "cosmac"],
        help="Instruction quirk preset",
    )
    parser.add_argument("--seed", type=int, default=None, help="Seed for the RND instruction")
    parser.add_argument(
        "--keys", type=_parse_keys, default=[], help="Keys held for the whole run, e.g. 5,A"
    )
    parser.add_argument(
        "--trace",
        action="store_true",
        help="Log every instruction (runs cycle by cycle, implies --log-level DEBUG)",
    )
    parser.add_argument(
        "--progress", action="store_true", help="Show a progress bar for compiled runs"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logger = MachineLogger(log_level="DEBUG" if args.trace else args.log_level)
    machine = Machine(
        seed=args.seed,
        quirks=Quirks.preset(args.quirks),
        logger=logger,
        trace=args.trace,
    )

    try:
        loaded = machine.load_rom(args.rom)
    except OSError as e:
        logger.error(f"Cannot read {args.rom}: {e}")
        return 1
    if not loaded:
        logger.error(f"{args.rom} does not fit in memory")
        return 1

    for key in args.keys:
        machine.press(key)

    if args.trace:
        for _ in range(args.cycles):
            machine.cycle()
    else:
        machine.run(args.cycles, progress=args.progress)

    print(vram_to_text(machine.state.vram))
    registers = " ".join(f"V{i:X}={value:02X}" for i, value in enumerate(machine.registers))
    print(registers)
    print(
        f"PC={machine.pc:04X} I={machine.index:04X} DT={machine.delay_timer} "
        f"ST={machine.sound_timer} unknown={machine.unknown_opcodes}"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
