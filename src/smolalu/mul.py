"""Shift-and-add multiplier core."""

from amaranth import Module, Mux
from amaranth.lib.wiring import In, Out, Component

from .add import RippleAdder
from .params import check_width
from .shift import BarrelShifter, ShiftDirection, ShiftMode


class MulStep(Component):  # noqa: DOC602,DOC603
    r"""One shift-and-add round.

    Given the partial product ``(hi, lo)`` after rounds :math:`0..i-1`,
    produce the partial product after round :math:`i`:

    * If ``bit`` (i.e. :math:`b_i`) is clear, ``(hi, lo)`` passes through.
    * Otherwise :math:`a \ll i` is added in. The low ``width`` bits of the
      shifted multiplicand are added to ``lo``; the bits shifted out (the
      shifter's overflow) are added to ``hi`` along with the carry out of
      the low addition.

    :class:`ShiftAndAddMultiplier` chains ``width - 1`` of these with
    constant ``i``; :class:`~smolalu.ctrl.MultiplierControl` runs a single
    one, once per clock, with ``i`` taken from its iteration counter.

    Parameters
    ----------
    width : int
        Width in bits of the multiplicand and of each product half.

    Attributes
    ----------
    a : In(width)
        Multiplicand.
    bit : In(1)
        Multiplier bit for this round.
    i : In(range(width + 1))
        Round number, i.e. the shift applied to ``a``.
    lo : In(width)
        Low half of the incoming partial product.
    hi : In(width)
        High half of the incoming partial product.
    lo_next : Out(width)
        Low half of the outgoing partial product.
    hi_next : Out(width)
        High half of the outgoing partial product.
    """

    def __init__(self, width=8):
        self.width = check_width(width)
        super().__init__({
            "a": In(self.width),
            "bit": In(1),
            "i": In(range(self.width + 1)),
            "lo": In(self.width),
            "hi": In(self.width),
            "lo_next": Out(self.width),
            "hi_next": Out(self.width)
        })

    def elaborate(self, platform):  # noqa: D102
        m = Module()

        m.submodules.shift = shift = BarrelShifter(self.width)
        m.submodules.add_lo = add_lo = RippleAdder(self.width)
        m.submodules.add_hi = add_hi = RippleAdder(self.width)

        m.d.comb += [
            shift.inp.eq(self.a),
            shift.dir.eq(ShiftDirection.LEFT),
            shift.mode.eq(ShiftMode.LOGICAL),
            shift.amount.eq(self.i),

            add_lo.a.eq(self.lo),
            add_lo.b.eq(shift.o),

            # A 2n-bit product never carries out of the high half.
            add_hi.a.eq(self.hi),
            add_hi.b.eq(shift.ovf),
            add_hi.ci.eq(add_lo.co),
        ]

        with m.If(self.bit):
            m.d.comb += [
                self.lo_next.eq(add_lo.o),
                self.hi_next.eq(add_hi.o)
            ]
        with m.Else():
            m.d.comb += [
                self.lo_next.eq(self.lo),
                self.hi_next.eq(self.hi)
            ]

        return m


class ShiftAndAddMultiplier(Component):  # noqa: DOC602,DOC603
    r"""Combinational unsigned shift-and-add multiplier.

    The product :math:`a * b` is :math:`2n` bits wide and is split across
    ``lo`` and ``hi``.

    Parameters
    ----------
    width : int
        Width in bits of both inputs ``a`` and ``b``. The product is
        :math:`2*n` bits wide.

    Attributes
    ----------
    width : int
        Bit width of the inputs and of each product half.
    a : In(width)
        The multiplicand.
    b : In(width)
        The multiplier.
    lo : Out(width)
        Low half of the product.
    hi : Out(width)
        High half of the product.

    Notes
    -----
    * Pen-and-paper multiplication in base 2, unrolled:

      .. code-block:: text

                   a3a2a1a0
                 * b3b2b1b0
                 ----------
                   a3a2a1a0: z0 = a*b0
                 a3a2a1a0  : z1 = (a*b1 << 1) + z0
               a3a2a1a0    : z2 = (a*b2 << 2) + z1
             a3a2a1a0      : z3 = (a*b3 << 3) + z2

    * Round 0 needs no shift or add, so only ``width - 1`` :class:`MulStep`
      instances are elaborated.
    """

    def __init__(self, width=8):
        self.width = check_width(width)
        super().__init__({
            "a": In(self.width),
            "b": In(self.width),
            "lo": Out(self.width),
            "hi": Out(self.width)
        })

    def elaborate(self, platform):  # noqa: D102
        m = Module()

        lo = Mux(self.b[0], self.a, 0)
        hi = 0
        for i in range(1, self.width):
            step = MulStep(self.width)
            m.submodules[f"step{i}"] = step
            m.d.comb += [
                step.a.eq(self.a),
                step.bit.eq(self.b[i]),
                step.i.eq(i),
                step.lo.eq(lo),
                step.hi.eq(hi)
            ]
            (lo, hi) = (step.lo_next, step.hi_next)

        m.d.comb += [
            self.lo.eq(lo),
            self.hi.eq(hi)
        ]

        return m
