"""Behaviour switches for instructions whose semantics differ between interpreters."""

import dataclasses
from dataclasses import dataclass


@dataclass(frozen=True)
class Quirks:
    """Interpreter quirks.

    The instance is stored as a static field of the machine state, so every
    distinct combination compiles its own version of the instruction set.

    Attributes:
        shift_uses_vy: 8XY6/8XYE shift VY into VX instead of shifting VX.
        jump_uses_vx: BNNN jumps to NNN + VX (X taken from the word) instead of NNN + V0.
        logic_resets_vf: 8XY1/8XY2/8XY3 clear VF.
        memory_increments_index: FX55/FX65 leave I past the last register transferred.
        exclusive_register_bound: FX55/FX65 transfer V0..V(X-1) instead of V0..VX.
        font_ignores_base: FX29 points I at VX * 5 without adding the font base address.
    """
    shift_uses_vy: bool = False
    jump_uses_vx: bool = False
    logic_resets_vf: bool = False
    memory_increments_index: bool = False
    exclusive_register_bound: bool = False
    font_ignores_base: bool = False

    @classmethod
    def preset(cls, name: str) -> "Quirks":
        """Get a predefined quirk set ("default", "reference", "cosmac")."""
        presets = {
            "default": cls(),
            "reference": cls(exclusive_register_bound=True, font_ignores_base=True),
            "cosmac": cls(
                shift_uses_vy=True,
                logic_resets_vf=True,
                memory_increments_index=True,
            ),
        }

        if name not in presets:
            raise ValueError(
                f"Unknown quirk preset '{name}'. Available: {list(presets.keys())}"
            )

        return presets[name]

    def replace(self, **changes) -> "Quirks":
        return dataclasses.replace(self, **changes)


DEFAULT_QUIRKS = Quirks()
