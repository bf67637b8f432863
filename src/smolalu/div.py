"""Restoring divider core."""

from amaranth import C, Module, Signal
from amaranth.lib.wiring import In, Out, Component

from .add import Comparator, RippleSubtractor
from .params import check_width
from .shift import BarrelShifter, ShiftDirection, ShiftMode


class Decompose(Component):  # noqa: DOC602,DOC603
    r"""Locate the most significant set bit of ``inp``.

    * ``pos`` is :math:`\lfloor \log_2(inp) \rfloor`, or 0 when ``inp`` is 0.
    * ``pow`` is :math:`2^{pos}`, or 0 when ``inp`` is 0.

    The search compares ``inp`` against a marker bit walked from bit 0 to
    bit ``width - 1``; the last marker that ``inp`` reaches wins.

    Parameters
    ----------
    width : int
        Width in bits of ``inp`` and ``pow``.

    Attributes
    ----------
    width : int
        Bit width of the input.
    inp : In(width)
        Value to search.
    pos : Out(range(width))
        Index of the most significant set bit of ``inp``.
    pow : Out(width)
        ``inp`` with every bit but the most significant set bit cleared.
    """

    def __init__(self, width=8):  # noqa: DOC1
        self.width = check_width(width)
        super().__init__({
            "inp": In(self.width),
            "pos": Out(range(self.width)),
            "pow": Out(self.width)
        })

    def elaborate(self, platform):
        m = Module()

        for p in range(self.width):
            marker = C(1 << p, self.width)
            with m.If(self.inp >= marker):
                m.d.comb += [
                    self.pos.eq(p),
                    self.pow.eq(marker)
                ]

        return m


class DivStep(Component):  # noqa: DOC602,DOC603
    r"""One restoring-division round.

    Align the divisor ``d`` under the leading bit of the running remainder
    ``n`` and try to subtract it:

    1. Shift ``d`` left by :math:`pos(n) - pos(d)`.
    2. If that overshoots ``n``, shift by one less instead.
    3. Subtract the aligned divisor from ``n``. Without a borrow, the
       difference becomes the new remainder and the quotient bit at the
       alignment position is set. With a borrow, nothing changes.

    The round is a no-op when :math:`n < d` (``less``) or when ``d`` is 0.

    Attributes
    ----------
    n : In(width)
        Running remainder.
    d : In(width)
        Divisor.
    q : In(width)
        Running quotient.
    r_next : Out(width)
        Remainder after this round.
    q_next : Out(width)
        Quotient after this round.
    less : Out(1)
        :math:`n < d` at the start of the round.
    borrow : Out(1)
        Borrow out of this round's trial subtraction.
    """

    def __init__(self, width=8):  # noqa: DOC1
        self.width = check_width(width)
        super().__init__({
            "n": In(self.width),
            "d": In(self.width),
            "q": In(self.width),
            "r_next": Out(self.width),
            "q_next": Out(self.width),
            "less": Out(1),
            "borrow": Out(1)
        })

    def elaborate(self, platform):
        m = Module()

        m.submodules.dec_n = dec_n = Decompose(self.width)
        m.submodules.dec_d = dec_d = Decompose(self.width)
        m.submodules.cmp = cmp = Comparator(self.width)
        m.submodules.trial = trial = BarrelShifter(self.width)
        m.submodules.overshoot = overshoot = Comparator(self.width)
        m.submodules.align = align = BarrelShifter(self.width)
        m.submodules.sub = sub = RippleSubtractor(self.width)

        tentative = Signal(range(self.width))
        amt = Signal(range(self.width))

        m.d.comb += [
            dec_n.inp.eq(self.n),
            dec_d.inp.eq(self.d),
            cmp.a.eq(self.n),
            cmp.b.eq(self.d),
            self.less.eq(cmp.lt)
        ]

        # pos(n) >= pos(d) whenever n >= d; otherwise leave the shift at 0
        # and let the trial subtraction borrow.
        with m.If(~cmp.lt):
            m.d.comb += tentative.eq(dec_n.pos - dec_d.pos)

        m.d.comb += [
            trial.inp.eq(self.d),
            trial.dir.eq(ShiftDirection.LEFT),
            trial.mode.eq(ShiftMode.LOGICAL),
            trial.amount.eq(tentative),
            overshoot.a.eq(trial.o),
            overshoot.b.eq(self.n),
        ]

        # Given n >= d, an overshoot implies tentative >= 1; at a shift of 0
        # the trial divisor is d itself.
        with m.If(overshoot.gt & ~cmp.lt):
            m.d.comb += amt.eq(tentative - 1)
        with m.Else():
            m.d.comb += amt.eq(tentative)

        m.d.comb += [
            align.inp.eq(self.d),
            align.dir.eq(ShiftDirection.LEFT),
            align.mode.eq(ShiftMode.LOGICAL),
            align.amount.eq(amt),
            sub.a.eq(self.n),
            sub.b.eq(align.o),
            self.borrow.eq(sub.bo)
        ]

        with m.If(~cmp.lt & ~sub.bo & self.d.any()):
            m.d.comb += [
                self.r_next.eq(sub.o),
                self.q_next.eq(self.q | (C(1, self.width) << amt))
            ]
        with m.Else():
            m.d.comb += [
                self.r_next.eq(self.n),
                self.q_next.eq(self.q)
            ]

        return m


class RestoringDivider(Component):  # noqa: DOC602,DOC603
    r"""Combinational unsigned restoring divider.

    * For :math:`d \neq 0`, ``q`` and ``r`` satisfy :math:`n = d*q + r` and
      :math:`r < d`.
    * Dividing by zero is not an error: ``q`` and ``r`` are both 0 and
      ``zero`` is asserted.

    Parameters
    ----------
    width : int
        Width in bits of both inputs ``n`` and ``d``. Outputs ``q`` and ``r``
        are the same width.

    Attributes
    ----------
    width : int
        Bit width of the inputs and outputs.
    n : In(width)
        The dividend.
    d : In(width)
        The divisor.
    q : Out(width)
        Quotient.
    r : Out(width)
        Remainder.
    zero : Out(1)
        The divisor was zero.
    less : Out(1)
        :math:`n < d`, in which case ``q`` is 0 and ``r`` is ``n``.
    borrow : Out(1)
        Borrow out of the final round's trial subtraction. This is set when
        the final round was a no-op.

    Notes
    -----
    * Each round clears the leading bit of the running remainder (relative
      to the divisor) and sets exactly one quotient bit, at a strictly
      lower position than the round before. ``width`` rounds are therefore
      always enough.

    * All ``width`` rounds are elaborated, even though rounds after the
      remainder drops below the divisor do nothing. This keeps the
      structure, and the latency of
      :class:`~smolalu.ctrl.DividerControl`, independent of the operands.
    """

    def __init__(self, width=8):
        self.width = check_width(width)
        super().__init__({
            "n": In(self.width),
            "d": In(self.width),
            "q": Out(self.width),
            "r": Out(self.width),
            "zero": Out(1),
            "less": Out(1),
            "borrow": Out(1)
        })

    def elaborate(self, platform):  # noqa: D102
        m = Module()

        rem = self.n
        quo = 0
        for i in range(self.width):
            step = DivStep(self.width)
            m.submodules[f"step{i}"] = step
            m.d.comb += [
                step.n.eq(rem),
                step.d.eq(self.d),
                step.q.eq(quo)
            ]
            if i == 0:
                m.d.comb += self.less.eq(step.less)
            (rem, quo) = (step.r_next, step.q_next)

        m.d.comb += [
            self.zero.eq(self.d == 0),
            self.borrow.eq(step.borrow)
        ]

        with m.If(self.d != 0):
            m.d.comb += [
                self.q.eq(quo),
                self.r.eq(rem)
            ]

        return m
