"""Stateful machine wrapper for hosts.

The functional core (``chipvm.emulator``) works on immutable states. ``Machine``
owns one state and offers the imperative interface a frontend drives: boot,
load, latch keys, cycle, read the display and persist state.
"""

import random
import time
from typing import Callable, Optional, Sequence, Union

import jax
import numpy as np

from chipvm import emulator, snapshot
from chipvm.config import Quirks, DEFAULT_QUIRKS
from chipvm.constants import NUM_KEYS
from chipvm.logging import MachineLogger
from chipvm.rendering import unpack_vram
from chipvm.state import create_state, reset_state

UnknownOpcodeObserver = Callable[[int, int], None]


class Machine:
    """One independent virtual machine.

    Args:
        seed: Seed for the RND instruction. A random seed is drawn when omitted,
            so runs are not reproducible unless a seed is given.
        quirks: Instruction behaviour switches (default: ``Quirks()``).
        logger: Diagnostics sink (default: a ``MachineLogger`` at WARNING).
        observer: Called with ``(pc, word)`` for every unknown opcode executed.
        trace: Log every executed instruction at DEBUG level. Only applies to
            ``cycle``; ``run`` executes inside a compiled loop.
    """

    def __init__(
        self,
        seed: Optional[int] = None,
        quirks: Quirks = DEFAULT_QUIRKS,
        logger: Optional[MachineLogger] = None,
        observer: Optional[UnknownOpcodeObserver] = None,
        trace: bool = False,
    ):
        if seed is None:
            seed = random.getrandbits(32)
        self.seed = seed
        self.quirks = quirks
        self.logger = logger or MachineLogger()
        self.observer = observer
        self.trace = trace
        self.unknown_opcodes = 0
        self.cycles = 0
        self.state = create_state(jax.random.PRNGKey(seed), quirks)

    def boot(self):
        """Reset everything and load the font."""
        self.state = create_state(self.state.rng, self.quirks)
        self.cycles = 0

    def reset(self):
        """Zero all state and rewind PC to the program origin. The font is not reloaded."""
        self.state = reset_state(self.state)
        self.cycles = 0

    def load_program(self, data: Union[bytes, Sequence[int]]) -> bool:
        """Load a raw program at 0x200. Returns False (and changes nothing) if it does not fit."""
        self.state, loaded = emulator.load_program(self.state, data)
        self.logger.log_program_loaded(len(data), loaded)
        return loaded

    def load_rom(self, filename: str) -> bool:
        with open(filename, "rb") as f:
            return self.load_program(f.read())

    def set_keys(self, keys: Sequence[bool]):
        """Latch the state of all 16 keys before the next cycle."""
        self.state = emulator.set_keys(self.state, keys)

    def press(self, key: int):
        self._set_key(key, True)

    def release(self, key: int):
        self._set_key(key, False)

    def _set_key(self, key: int, pressed: bool):
        if not 0 <= key < NUM_KEYS:
            raise ValueError(f"Key must be in 0..{NUM_KEYS - 1}, got {key}")
        self.state = self.state.replace(keys=self.state.keys.at[key].set(pressed))

    def cycle(self) -> bool:
        """Run one cycle. Returns whether an instruction was executed.

        When PC has left memory nothing is executed, but the timers still tick.
        """
        self.state, report = emulator.cycle(self.state)
        self.cycles += 1

        executed = bool(report.executed)
        if executed:
            pc, word = int(report.pc), int(report.word)
            if self.trace:
                self.logger.log_instruction(pc, word)
            if not bool(report.known):
                self._report_unknown(pc, word)
        return executed

    def run(self, cycles: int, progress: bool = False) -> int:
        """Run ``cycles`` cycles in one compiled loop.

        Returns the number of cycles that executed an instruction. Unknown
        opcodes are reported after the loop finishes, in execution order.
        """
        if cycles <= 0:
            return 0

        start = time.time()
        self.state, reports = emulator.run_cycles(self.state, cycles, progress)
        self.cycles += cycles

        executed = np.asarray(reports.executed)
        unknown = executed & ~np.asarray(reports.known)
        for pc, word in zip(np.asarray(reports.pc)[unknown], np.asarray(reports.word)[unknown]):
            self._report_unknown(int(pc), int(word))

        self.logger.log_run(cycles, time.time() - start)
        return int(executed.sum())

    def _report_unknown(self, pc: int, word: int):
        self.unknown_opcodes += 1
        self.logger.log_unknown_opcode(pc, word)
        if self.observer is not None:
            self.observer(pc, word)

    def vram_snapshot(self) -> bytes:
        """Packed display, 256 bytes, row-major, MSB is the leftmost pixel."""
        return np.asarray(self.state.vram).tobytes()

    def pixels(self) -> np.ndarray:
        """Display as a (32, 64) boolean array."""
        return unpack_vram(self.state.vram)

    @property
    def sound_active(self) -> bool:
        """Whether the host should be playing a tone."""
        return int(self.state.sound_timer) > 0

    @property
    def registers(self) -> np.ndarray:
        return np.asarray(self.state.V).copy()

    @property
    def pc(self) -> int:
        return int(self.state.pc)

    @property
    def index(self) -> int:
        return int(self.state.I)

    @property
    def delay_timer(self) -> int:
        return int(self.state.delay_timer)

    @property
    def sound_timer(self) -> int:
        return int(self.state.sound_timer)

    @property
    def stack_depth(self) -> int:
        return int(self.state.stack.pointer)

    @staticmethod
    def serialize_size() -> int:
        return snapshot.SNAPSHOT_SIZE

    def serialize(self) -> bytes:
        """Snapshot of every piece of machine state (see ``chipvm.snapshot``)."""
        return snapshot.serialize(self.state)

    def unserialize(self, data: bytes) -> bool:
        """Restore a snapshot. Returns False and keeps the current state if the size is wrong."""
        restored = snapshot.restore(self.state, data)
        if restored is None:
            self.logger.warning(
                f"Snapshot rejected: expected {snapshot.SNAPSHOT_SIZE} bytes, got {len(data)}"
            )
            return False
        self.state = restored
        return True

    def __repr__(self) -> str:
        return f"Machine(pc=0x{self.pc:04X}, I=0x{self.index:04X}, cycles={self.cycles})"
