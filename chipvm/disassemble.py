"""Instruction word to mnemonic text, for logs and traces."""

from chipvm.decode import is_known_opcode


def reg(num: int) -> str:
    return "V" + format(num, "X")


def disassemble(word: int) -> str:
    """Render a 16-bit word in the usual mnemonic notation.

    Words that are not one of the 35 instructions render as ``???? 0xWWWW``.
    """
    word &= 0xFFFF
    if not is_known_opcode(word):
        return f"???? 0x{word:04X}"

    opcode = (word & 0xF000) >> 12
    x = reg((word & 0x0F00) >> 8)
    y = reg((word & 0x00F0) >> 4)
    n = word & 0x000F
    kk = word & 0x00FF
    nnn = word & 0x0FFF

    if opcode == 0x0:
        if word == 0x00E0:
            return "CLS"
        if word == 0x00EE:
            return "RET"
        return f"SYS 0x{nnn:03X}"
    if opcode == 0x8:
        alu = {
            0x0: f"LD {x}, {y}",
            0x1: f"OR {x}, {y}",
            0x2: f"AND {x}, {y}",
            0x3: f"XOR {x}, {y}",
            0x4: f"ADD {x}, {y}",
            0x5: f"SUB {x}, {y}",
            0x6: f"SHR {x}, {y}",
            0x7: f"SUBN {x}, {y}",
            0xE: f"SHL {x}, {y}",
        }
        return alu[n]
    if opcode == 0xE:
        return f"SKP {x}" if kk == 0x9E else f"SKNP {x}"
    if opcode == 0xF:
        misc = {
            0x07: f"LD {x}, DT",
            0x0A: f"LD {x}, K",
            0x15: f"LD DT, {x}",
            0x18: f"LD ST, {x}",
            0x1E: f"ADD I, {x}",
            0x29: f"LD F, {x}",
            0x33: f"LD B, {x}",
            0x55: f"LD [I], {x}",
            0x65: f"LD {x}, [I]",
        }
        return misc[kk]

    simple = {
        0x1: f"JP 0x{nnn:03X}",
        0x2: f"CALL 0x{nnn:03X}",
        0x3: f"SE {x}, 0x{kk:02X}",
        0x4: f"SNE {x}, 0x{kk:02X}",
        0x5: f"SE {x}, {y}",
        0x6: f"LD {x}, 0x{kk:02X}",
        0x7: f"ADD {x}, 0x{kk:02X}",
        0x9: f"SNE {x}, {y}",
        0xA: f"LD I, 0x{nnn:03X}",
        0xB: f"JP V0, 0x{nnn:03X}",
        0xC: f"RND {x}, 0x{kk:02X}",
        0xD: f"DRW {x}, {y}, {n}",
    }
    return simple[opcode]
