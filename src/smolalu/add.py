"""Ripple-carry adder, ripple-borrow subtractor and comparator cores."""

from amaranth import Cat, Module
from amaranth.lib.wiring import In, Out, Component

from .params import check_width


class FullAdder(Component):
    """One-bit adder cell.

    A half-add of ``a`` and ``b``, combined with the carry-in ``ci``.
    :class:`RippleAdder` chains ``width`` of these, and
    :class:`~smolalu.ctrl.AdditionControl` reuses a single one per clock.
    """

    def __init__(self):
        super().__init__({
            "a": In(1),
            "b": In(1),
            "ci": In(1),
            "s": Out(1),
            "co": Out(1)
        })

    def elaborate(self, platform):  # noqa: D102
        m = Module()

        half = self.a ^ self.b
        m.d.comb += [
            self.s.eq(half ^ self.ci),
            self.co.eq((self.a & self.b) | (half & self.ci))
        ]

        return m


class FullSubtractor(Component):
    """One-bit subtractor cell computing ``a - b - bi``."""

    def __init__(self):
        super().__init__({
            "a": In(1),
            "b": In(1),
            "bi": In(1),
            "d": Out(1),
            "bo": Out(1)
        })

    def elaborate(self, platform):  # noqa: D102
        m = Module()

        half = self.a ^ self.b
        m.d.comb += [
            self.d.eq(half ^ self.bi),
            # Borrow if a < b outright, or if a == b and the lower bit borrowed.
            self.bo.eq((~self.a & self.b) | (~half & self.bi))
        ]

        return m


class RippleAdder(Component):  # noqa: DOC602,DOC603
    r"""Fixed-width ripple-carry adder.

    * ``o`` is :math:`(a + b + ci) \bmod 2^n`.
    * ``co`` is the carry out of the most significant bit.

    Parameters
    ----------
    width : int
        Width in bits of ``a``, ``b`` and ``o``.

    Attributes
    ----------
    width : int
        Bit width of the operands.
    a : In(width)
        Augend.
    b : In(width)
        Addend.
    ci : In(1)
        Carry into bit 0. Reads as 0 if left undriven.
    o : Out(width)
        Sum.
    co : Out(1)
        Carry out of bit ``width - 1``.
    """

    def __init__(self, width=8):
        self.width = check_width(width)
        super().__init__({
            "a": In(self.width),
            "b": In(self.width),
            "ci": In(1),
            "o": Out(self.width),
            "co": Out(1)
        })

    def elaborate(self, platform):  # noqa: D102
        m = Module()

        carry = self.ci
        sums = []
        for i in range(self.width):
            cell = FullAdder()
            m.submodules[f"bit{i}"] = cell
            m.d.comb += [
                cell.a.eq(self.a[i]),
                cell.b.eq(self.b[i]),
                cell.ci.eq(carry)
            ]
            sums.append(cell.s)
            carry = cell.co

        m.d.comb += [
            self.o.eq(Cat(*sums)),
            self.co.eq(carry)
        ]

        return m


class RippleSubtractor(Component):  # noqa: DOC602,DOC603
    r"""Fixed-width ripple-borrow subtractor.

    * ``o`` is :math:`(a - b - bi) \bmod 2^n`.
    * ``bo`` is the borrow out of the most significant bit. With ``bi``
      clear, ``bo`` is set exactly when :math:`a < b` (unsigned).

    Parameters
    ----------
    width : int
        Width in bits of ``a``, ``b`` and ``o``.

    Attributes
    ----------
    width : int
        Bit width of the operands.
    a : In(width)
        Minuend.
    b : In(width)
        Subtrahend.
    bi : In(1)
        Borrow into bit 0. Reads as 0 if left undriven.
    o : Out(width)
        Difference.
    bo : Out(1)
        Borrow out of bit ``width - 1``.
    """

    def __init__(self, width=8):
        self.width = check_width(width)
        super().__init__({
            "a": In(self.width),
            "b": In(self.width),
            "bi": In(1),
            "o": Out(self.width),
            "bo": Out(1)
        })

    def elaborate(self, platform):  # noqa: D102
        m = Module()

        borrow = self.bi
        diffs = []
        for i in range(self.width):
            cell = FullSubtractor()
            m.submodules[f"bit{i}"] = cell
            m.d.comb += [
                cell.a.eq(self.a[i]),
                cell.b.eq(self.b[i]),
                cell.bi.eq(borrow)
            ]
            diffs.append(cell.d)
            borrow = cell.bo

        m.d.comb += [
            self.o.eq(Cat(*diffs)),
            self.bo.eq(borrow)
        ]

        return m


class Comparator(Component):  # noqa: DOC602,DOC603
    """Unsigned magnitude comparator built from two subtractors.

    * ``lt`` is the borrow out of :math:`a - b`.
    * ``gt`` is the borrow out of :math:`b - a`.
    * ``equal`` is ``NOR(lt, gt)``.

    Parameters
    ----------
    width : int
        Width in bits of ``a`` and ``b``.

    Attributes
    ----------
    width : int
        Bit width of the operands.
    a : In(width)
        Left-hand operand.
    b : In(width)
        Right-hand operand.
    lt : Out(1)
        :math:`a < b`.
    gt : Out(1)
        :math:`a > b`.
    equal : Out(1)
        :math:`a = b`.
    """

    def __init__(self, width=8):
        self.width = check_width(width)
        super().__init__({
            "a": In(self.width),
            "b": In(self.width),
            "lt": Out(1),
            "gt": Out(1),
            "equal": Out(1)
        })

    def elaborate(self, platform):  # noqa: D102
        m = Module()

        m.submodules.ab = ab = RippleSubtractor(self.width)
        m.submodules.ba = ba = RippleSubtractor(self.width)

        m.d.comb += [
            ab.a.eq(self.a),
            ab.b.eq(self.b),
            ba.a.eq(self.b),
            ba.b.eq(self.a),
            self.lt.eq(ab.bo),
            self.gt.eq(ba.bo),
            self.equal.eq(~(ab.bo | ba.bo))
        ]

        return m
