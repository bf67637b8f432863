"""Opcode dispatcher tying the single-cycle and multicycle units together."""

from amaranth import Module, Mux, Signal
from amaranth.lib.wiring import In, Out, Component
from amaranth.lib.enum import Enum

from .add import Comparator
from .ctrl import (AdditionControl, SubtractionControl, MultiplierControl,
                   DividerControl)
from .params import check_width
from .shift import BarrelShifter, ShiftControl, ShiftMode


class Opcode(Enum, shape=4):  # noqa: DOC602,DOC603
    """ALU operation select.

    The 4-bit ``op`` port of :class:`ALU` may carry any value; the three
    encodings not listed here (``0b1101`` to ``0b1111``) are no-ops.

    Attributes
    ----------
    ADD : int
        Multicycle; ``lo`` = sum, ``hi``/``flag`` = carry.
    SUB : int
        Multicycle; ``lo`` = ``a - b``, ``hi``/``flag`` = borrow.
    MUL : int
        Multicycle; ``hi:lo`` = product, ``flag`` = ``hi`` is non-zero.
    DIV : int
        Multicycle; ``lo`` = quotient, ``hi`` = remainder,
        ``flag`` = divide by zero.
    SHIFT_LOGICAL : int
        ``a`` shifted per the :class:`~smolalu.shift.ShiftControl` word in
        ``b``; ``hi`` = displaced bits, ``flag`` = any bit displaced.
    SHIFT_ARITHMETIC : int
        As ``SHIFT_LOGICAL``, but right shifts sign-extend and left shifts
        fill with 0.
    LESS_THAN : int
        ``flag`` = ``a < b``.
    GREATER_THAN : int
        ``flag`` = ``a > b``.
    EQUAL : int
        ``flag`` = ``a == b``.
    AND : int
        ``lo`` = ``a & b``, ``flag`` = result is zero.
    OR : int
        ``lo`` = ``a | b``, ``flag`` = result is zero.
    XOR : int
        ``lo`` = ``a ^ b``, ``flag`` = result is zero.
    NOT : int
        ``lo`` = ``~a``, ``flag`` = result is zero.
    """

    ADD = 0b0000
    SUB = 0b0001
    MUL = 0b0010
    DIV = 0b0011
    SHIFT_LOGICAL = 0b0100
    SHIFT_ARITHMETIC = 0b0101
    LESS_THAN = 0b0110
    GREATER_THAN = 0b0111
    EQUAL = 0b1000
    AND = 0b1001
    OR = 0b1010
    XOR = 0b1011
    NOT = 0b1100


MULTICYCLE = (Opcode.ADD, Opcode.SUB, Opcode.MUL, Opcode.DIV)


class ALU(Component):  # noqa: DOC602,DOC603
    r"""Arithmetic logic unit.

    * Single-cycle opcodes (shifts, comparisons, bitwise logic) and no-ops
      produce their result and assert ``done`` combinationally, every cycle.
      ``start`` has no effect on them.
    * Multicycle opcodes (:data:`MULTICYCLE`) forward ``lo``, ``hi``,
      ``flag`` and ``done`` of the matching controller in
      :mod:`smolalu.ctrl`. Pulse ``start`` for one cycle and hold ``op`` until
      ``done`` is seen.

    Parameters
    ----------
    width : int
        Width in bits of the operands and of each result half. Must be at
        least 2, so that ``b`` can hold a shift control word.

    Attributes
    ----------
    width : int
        Bit width of the operands.
    start : In(1)
        One-cycle pulse starting a multicycle operation.
    rst : In(1)
        Synchronous reset of all controllers.
    op : In(4)
        Operation select; see :class:`Opcode`.
    a : In(width)
        First operand.
    b : In(width)
        Second operand, or a packed
        :class:`~smolalu.shift.ShiftControl` word for shifts.
    lo : Out(width)
        Primary result.
    hi : Out(width)
        Secondary result.
    flag : Out(1)
        Carry, borrow, comparison or status bit, depending on ``op``.
    done : Out(1)
        ``lo``, ``hi`` and ``flag`` are valid.

    Notes
    -----
    * ``start`` fans out to all four controllers, whatever ``op`` is, so
      every controller runs on every multicycle request and only the
      selected one is observed. Controllers share no state, so the unused
      results are harmless. This mirrors a hardware ALU with one start line.

    * Only one multicycle operation can be in flight. A ``start`` pulse
      arriving before the running operation finishes is ignored by the
      controllers.
    """

    def __init__(self, width=8):
        self.width = check_width(width, minimum=2)
        super().__init__({
            "start": In(1),
            "rst": In(1),
            "op": In(4),
            "a": In(self.width),
            "b": In(self.width),
            "lo": Out(self.width),
            "hi": Out(self.width),
            "flag": Out(1),
            "done": Out(1)
        })

    def elaborate(self, platform):  # noqa: D102
        m = Module()

        m.submodules.add = add = AdditionControl(self.width)
        m.submodules.sub = sub = SubtractionControl(self.width)
        m.submodules.mul = mul = MultiplierControl(self.width)
        m.submodules.div = div = DividerControl(self.width)
        m.submodules.shift = shift = BarrelShifter(self.width)
        m.submodules.cmp = cmp = Comparator(self.width)

        controllers = {
            Opcode.ADD: add,
            Opcode.SUB: sub,
            Opcode.MUL: mul,
            Opcode.DIV: div
        }

        for ctl in controllers.values():
            m.d.comb += [
                ctl.start.eq(self.start),
                ctl.rst.eq(self.rst),
                ctl.a.eq(self.a),
                ctl.b.eq(self.b)
            ]

        shift_ctl = ShiftControl(self.width)(self.b)
        m.d.comb += [
            shift.inp.eq(self.a),
            shift.dir.eq(shift_ctl.direction),
            shift.fill.eq(shift_ctl.fill),
            # The amount field can be wider than the shifter's range.
            shift.amount.eq(Mux(shift_ctl.amount > self.width, self.width,
                                shift_ctl.amount)),
            shift.mode.eq(ShiftMode.LOGICAL),
            cmp.a.eq(self.a),
            cmp.b.eq(self.b)
        ]

        logic = Signal(self.width)

        with m.Switch(self.op):
            for op, ctl in controllers.items():
                with m.Case(op):
                    m.d.comb += [
                        self.lo.eq(ctl.lo),
                        self.hi.eq(ctl.hi),
                        self.flag.eq(ctl.flag),
                        self.done.eq(ctl.done)
                    ]

            with m.Case(Opcode.SHIFT_LOGICAL, Opcode.SHIFT_ARITHMETIC):
                with m.If(self.op == Opcode.SHIFT_ARITHMETIC):
                    m.d.comb += shift.mode.eq(ShiftMode.ARITHMETIC)
                m.d.comb += [
                    self.lo.eq(shift.o),
                    self.hi.eq(shift.ovf),
                    self.flag.eq(shift.ovf.any()),
                    self.done.eq(1)
                ]

            with m.Case(Opcode.LESS_THAN):
                m.d.comb += [
                    self.flag.eq(cmp.lt),
                    self.done.eq(1)
                ]

            with m.Case(Opcode.GREATER_THAN):
                m.d.comb += [
                    self.flag.eq(cmp.gt),
                    self.done.eq(1)
                ]

            with m.Case(Opcode.EQUAL):
                m.d.comb += [
                    self.flag.eq(cmp.equal),
                    self.done.eq(1)
                ]

            with m.Case(Opcode.AND, Opcode.OR, Opcode.XOR, Opcode.NOT):
                with m.Switch(self.op):
                    with m.Case(Opcode.AND):
                        m.d.comb += logic.eq(self.a & self.b)
                    with m.Case(Opcode.OR):
                        m.d.comb += logic.eq(self.a | self.b)
                    with m.Case(Opcode.XOR):
                        m.d.comb += logic.eq(self.a ^ self.b)
                    with m.Case(Opcode.NOT):
                        m.d.comb += logic.eq(~self.a)

                m.d.comb += [
                    self.lo.eq(logic),
                    self.flag.eq(logic == 0),
                    self.done.eq(1)
                ]

            # Undefined opcodes are no-ops that complete immediately.
            with m.Default():
                m.d.comb += self.done.eq(1)

        return m
