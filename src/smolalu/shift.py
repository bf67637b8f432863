"""Barrel shifter core and shift control word."""

from amaranth import Cat, Module, unsigned
from amaranth.lib.data import StructLayout
from amaranth.lib.wiring import In, Out, Component
from amaranth.lib.enum import Enum

from .params import check_width


class ShiftDirection(Enum, shape=1):  # noqa: DOC602,DOC603
    """Direction of a shift.

    Attributes
    ----------
    LEFT : int
        Shift towards the most significant bit.
    RIGHT : int
        Shift towards the least significant bit.
    """

    LEFT = 0
    RIGHT = 1


class ShiftMode(Enum, shape=1):  # noqa: DOC602,DOC603
    """Fill policy of a shift.

    Attributes
    ----------
    LOGICAL : int
        Vacated bits take the value of the shifter's ``fill`` input.
    ARITHMETIC : int
        Right shifts sign-extend from the input's most significant bit.
        Left shifts fill with zeros; ``fill`` is ignored.
    """

    LOGICAL = 0
    ARITHMETIC = 1


class ShiftControl(StructLayout):  # noqa: DOC602,DOC603
    """Packed shift descriptor, one operand wide.

    This is the legacy wire format carried in operand ``b`` of a shift
    instruction:

    ======== =========================
    Bits     Field
    ======== =========================
    0        :attr:`direction`
    1..n-2   :attr:`amount`
    n-1      :attr:`fill`
    ======== =========================

    Parameters
    ----------
    width : int
        Width in bits of the packed word. Must be at least 2.

    Attributes
    ----------
    direction: ShiftDirection
        Which way to shift.
    amount: Signal(width - 2)
        How many bit positions to shift by.
    fill: Signal(1)
        Value shifted into vacated positions by a logical shift.
    """

    def __init__(self, width):
        if width < 2:
            raise ValueError("a shift control word needs at least 2 bits")

        super().__init__({
            "direction": ShiftDirection,
            "amount": unsigned(width - 2),
            "fill": unsigned(1),
        })


def pack_shift(width, direction, amount, fill=0):
    """Build the integer value of a :class:`ShiftControl` word.

    Parameters
    ----------
    width : int
        Width in bits of the packed word.
    direction : ShiftDirection
        Which way to shift.
    amount : int
        Shift amount; must fit in ``width - 2`` bits.
    fill : int, optional
        Fill bit for logical shifts.

    Returns
    -------
    int
        The packed word.

    Raises
    ------
    ValueError
        If ``width`` is less than 2, or if ``amount`` or ``fill`` do not
        fit in their fields.
    """
    if width < 2:
        raise ValueError("a shift control word needs at least 2 bits")
    if not 0 <= amount < 2**(width - 2):
        raise ValueError(f"shift amount {amount} does not fit in "
                         f"{width - 2} bits")
    if fill not in (0, 1):
        raise ValueError(f"fill must be 0 or 1, not {fill!r}")

    return (ShiftDirection(direction).value |
            (amount << 1) |
            (fill << (width - 1)))


class BarrelShifter(Component):  # noqa: DOC602,DOC603
    r"""Combinational barrel shifter with overflow capture.

    * ``o`` is ``inp`` shifted by ``amount`` positions in direction ``dir``.
      Vacated positions take ``fill`` (logical), or the sign bit of ``inp``
      (arithmetic right shift), or zero (arithmetic left shift).
    * ``ovf`` holds the bits pushed off the end, right-aligned: the high
      ``amount`` bits of ``inp`` for a left shift, and the low ``amount``
      bits of ``inp`` for a right shift.

    Parameters
    ----------
    width : int
        Width in bits of ``inp``, ``o`` and ``ovf``.

    Attributes
    ----------
    width : int
        Bit width of the data path.
    inp : In(width)
        Value to shift.
    dir : In(ShiftDirection)
        Shift direction.
    amount : In(range(width + 1))
        Shift amount. ``0`` passes ``inp`` through with no overflow; any
        amount of ``width`` or more shifts every bit out.
    fill : In(1)
        Fill bit for logical shifts.
    mode : In(ShiftMode)
        Logical or arithmetic shift.
    o : Out(width)
        Shifted value.
    ovf : Out(width)
        Displaced bits.
    """

    def __init__(self, width=8):
        self.width = check_width(width)
        super().__init__({
            "inp": In(self.width),
            "dir": In(ShiftDirection),
            "amount": In(range(self.width + 1)),
            "fill": In(1),
            "mode": In(ShiftMode),
            "o": Out(self.width),
            "ovf": Out(self.width)
        })

    def elaborate(self, platform):  # noqa: D102
        m = Module()

        w = self.width
        left = self.dir == ShiftDirection.LEFT
        arith = self.mode == ShiftMode.ARITHMETIC

        # Arithmetic left shifts have no sign to preserve, so they fill with 0.
        fill_bit = (self.fill & ~arith) | (self.inp[-1] & arith & ~left)

        with m.Switch(self.amount):
            with m.Case(0):
                m.d.comb += self.o.eq(self.inp)

            for k in range(1, w):
                with m.Case(k):
                    with m.If(left):
                        m.d.comb += [
                            self.o.eq(Cat(fill_bit.replicate(k),
                                          self.inp[:w - k])),
                            self.ovf.eq(self.inp[w - k:])
                        ]
                    with m.Else():
                        m.d.comb += [
                            self.o.eq(Cat(self.inp[k:],
                                          fill_bit.replicate(k))),
                            self.ovf.eq(self.inp[:k])
                        ]

            with m.Default():
                m.d.comb += [
                    self.o.eq(fill_bit.replicate(w)),
                    self.ovf.eq(self.inp)
                ]

        return m
