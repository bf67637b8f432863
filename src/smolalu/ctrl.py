"""Multicycle FSM controllers for the add, subtract, multiply and divide cores.

All four controllers share one port signature and one handshake:

* A computation starts on the clock edge that sees ``start`` asserted while
  the controller is idle. ``start`` is ignored at any other time.
* ``done`` is asserted for exactly one clock cycle, during which ``lo``,
  ``hi`` and ``flag`` hold the result. The result stays latched afterwards
  until the next computation starts.
* ``rst`` is synchronous: on the next edge every register, including the FSM
  state, returns to its initial value and any computation in flight is
  discarded.

Every controller walks ``IDLE -> LOAD -> STEP (loop) -> DONE -> IDLE``.
Operands are latched on leaving ``IDLE``, so they need only be valid in the
cycle ``start`` is asserted.
"""

from amaranth import Cat, Module, Signal
from amaranth.hdl import ResetInserter
from amaranth.lib import wiring
from amaranth.lib.wiring import In, Out, Component

from .add import FullAdder, FullSubtractor
from .div import DivStep
from .mul import MulStep
from .params import check_width


def controller_signature(width):
    """Create the port signature shared by all controllers.

    Parameters
    ----------
    width : int
        Width in bits of the operands and of each result half.

    Returns
    -------
    :class:`amaranth:amaranth.lib.wiring.Signature`
        Signature with inputs ``start``, ``rst``, ``a``, ``b`` and outputs
        ``lo``, ``hi``, ``flag``, ``done``.
    """
    return wiring.Signature({
        "start": In(1),
        "rst": In(1),
        "a": In(width),
        "b": In(width),
        "lo": Out(width),
        "hi": Out(width),
        "flag": Out(1),
        "done": Out(1)
    })


class AdditionControl(Component):  # noqa: DOC602,DOC603
    """Bit-serial adder.

    One :class:`~smolalu.add.FullAdder` cell computes one bit of the sum per
    clock, least significant bit first, with the carry threaded through a
    register between cycles.

    * Latency: ``done`` rises ``width + 2`` clock cycles after the edge that
      sampled ``start``.

    Parameters
    ----------
    width : int
        Width in bits of the operands.

    Attributes
    ----------
    lo : Out(width)
        Sum.
    hi : Out(width)
        Final carry, zero-extended.
    flag : Out(1)
        Final carry.
    """

    def __init__(self, width=8):
        self.width = check_width(width)
        super().__init__(controller_signature(self.width))

    def elaborate(self, platform):  # noqa: D102
        m = Module()

        m.submodules.cell = cell = FullAdder()

        # Operands are shifted right each step so bit 0 is always current.
        a_sr = Signal(self.width)
        b_sr = Signal(self.width)
        carry = Signal()
        iters_left = Signal(range(self.width + 1))

        m.d.comb += [
            cell.a.eq(a_sr[0]),
            cell.b.eq(b_sr[0]),
            cell.ci.eq(carry)
        ]

        with m.FSM():
            with m.State("IDLE"):
                with m.If(self.start):
                    m.d.sync += [
                        a_sr.eq(self.a),
                        b_sr.eq(self.b)
                    ]
                    m.next = "LOAD"

            with m.State("LOAD"):
                m.d.sync += [
                    carry.eq(0),
                    iters_left.eq(self.width),
                    self.lo.eq(0),
                    self.hi.eq(0),
                    self.flag.eq(0)
                ]
                m.next = "STEP"

            with m.State("STEP"):
                # Sum bits enter at the top and walk down to their place.
                m.d.sync += [
                    a_sr.eq(a_sr >> 1),
                    b_sr.eq(b_sr >> 1),
                    carry.eq(cell.co),
                    iters_left.eq(iters_left - 1),
                    self.lo.eq(Cat(self.lo[1:], cell.s))
                ]

                with m.If(iters_left == 1):
                    m.d.sync += [
                        self.hi.eq(cell.co),
                        self.flag.eq(cell.co)
                    ]
                    m.next = "DONE"

            with m.State("DONE"):
                m.d.comb += self.done.eq(1)
                m.next = "IDLE"

        return ResetInserter(self.rst)(m)


class SubtractionControl(Component):  # noqa: DOC602,DOC603
    """Bit-serial subtractor computing ``a - b``.

    The borrow-chain counterpart of :class:`AdditionControl`.

    * Latency: ``done`` rises ``width + 2`` clock cycles after the edge that
      sampled ``start``.

    Parameters
    ----------
    width : int
        Width in bits of the operands.

    Attributes
    ----------
    lo : Out(width)
        Difference.
    hi : Out(width)
        Final borrow, zero-extended.
    flag : Out(1)
        Final borrow; set exactly when ``a < b``.
    """

    def __init__(self, width=8):
        self.width = check_width(width)
        super().__init__(controller_signature(self.width))

    def elaborate(self, platform):  # noqa: D102
        m = Module()

        m.submodules.cell = cell = FullSubtractor()

        a_sr = Signal(self.width)
        b_sr = Signal(self.width)
        borrow = Signal()
        iters_left = Signal(range(self.width + 1))

        m.d.comb += [
            cell.a.eq(a_sr[0]),
            cell.b.eq(b_sr[0]),
            cell.bi.eq(borrow)
        ]

        with m.FSM():
            with m.State("IDLE"):
                with m.If(self.start):
                    m.d.sync += [
                        a_sr.eq(self.a),
                        b_sr.eq(self.b)
                    ]
                    m.next = "LOAD"

            with m.State("LOAD"):
                m.d.sync += [
                    borrow.eq(0),
                    iters_left.eq(self.width),
                    self.lo.eq(0),
                    self.hi.eq(0),
                    self.flag.eq(0)
                ]
                m.next = "STEP"

            with m.State("STEP"):
                m.d.sync += [
                    a_sr.eq(a_sr >> 1),
                    b_sr.eq(b_sr >> 1),
                    borrow.eq(cell.bo),
                    iters_left.eq(iters_left - 1),
                    self.lo.eq(Cat(self.lo[1:], cell.d))
                ]

                with m.If(iters_left == 1):
                    m.d.sync += [
                        self.hi.eq(cell.bo),
                        self.flag.eq(cell.bo)
                    ]
                    m.next = "DONE"

            with m.State("DONE"):
                m.d.comb += self.done.eq(1)
                m.next = "IDLE"

        return ResetInserter(self.rst)(m)


class MultiplierControl(Component):  # noqa: DOC602,DOC603
    """Multicycle shift-and-add multiplier.

    Runs one :class:`~smolalu.mul.MulStep` round per clock, accumulating the
    partial product directly in ``hi`` and ``lo``. Round 0 runs in ``STEP``
    like the others, so all ``width`` rounds take a clock each.

    * Latency: ``done`` rises ``width + 2`` clock cycles after the edge that
      sampled ``start``, the same as the other controllers. The ALU starts
      all four on one ``start`` pulse, so they must all be idle again
      before the next one.

    Parameters
    ----------
    width : int
        Width in bits of the operands and of each product half.

    Attributes
    ----------
    lo : Out(width)
        Low half of the product.
    hi : Out(width)
        High half of the product.
    flag : Out(1)
        The product does not fit in ``width`` bits (``hi`` is non-zero).
    """

    def __init__(self, width=8):
        self.width = check_width(width)
        super().__init__(controller_signature(self.width))

    def elaborate(self, platform):  # noqa: D102
        m = Module()

        m.submodules.step = step = MulStep(self.width)

        a_copy = Signal(self.width)
        b_copy = Signal(self.width)
        i = Signal(range(self.width + 1))

        m.d.comb += [
            step.a.eq(a_copy),
            step.bit.eq(b_copy.bit_select(i, 1)),
            step.i.eq(i),
            step.lo.eq(self.lo),
            step.hi.eq(self.hi)
        ]

        with m.FSM():
            with m.State("IDLE"):
                with m.If(self.start):
                    m.d.sync += [
                        a_copy.eq(self.a),
                        b_copy.eq(self.b)
                    ]
                    m.next = "LOAD"

            with m.State("LOAD"):
                m.d.sync += [
                    self.lo.eq(0),
                    self.hi.eq(0),
                    self.flag.eq(0),
                    i.eq(0)
                ]
                m.next = "STEP"

            with m.State("STEP"):
                m.d.sync += [
                    self.lo.eq(step.lo_next),
                    self.hi.eq(step.hi_next),
                    i.eq(i + 1)
                ]

                with m.If(i == self.width - 1):
                    m.d.sync += self.flag.eq(step.hi_next.any())
                    m.next = "DONE"

            with m.State("DONE"):
                m.d.comb += self.done.eq(1)
                m.next = "IDLE"

        return ResetInserter(self.rst)(m)


class DividerControl(Component):  # noqa: DOC602,DOC603
    """Multicycle restoring divider computing ``a / b``.

    Runs one :class:`~smolalu.div.DivStep` round per clock for exactly
    ``width`` rounds, regardless of when the remainder drops below the
    divisor, so latency does not depend on the operands.

    * Latency: ``done`` rises ``width + 2`` clock cycles after the edge that
      sampled ``start``.

    Parameters
    ----------
    width : int
        Width in bits of the operands, quotient and remainder.

    Attributes
    ----------
    lo : Out(width)
        Quotient; 0 when dividing by zero.
    hi : Out(width)
        Remainder; 0 when dividing by zero.
    flag : Out(1)
        The divisor was zero.
    """

    def __init__(self, width=8):
        self.width = check_width(width)
        super().__init__(controller_signature(self.width))

    def elaborate(self, platform):  # noqa: D102
        m = Module()

        m.submodules.step = step = DivStep(self.width)

        a_copy = Signal(self.width)
        b_copy = Signal(self.width)
        iters_left = Signal(range(self.width + 1))

        m.d.comb += [
            step.n.eq(self.hi),
            step.d.eq(b_copy),
            step.q.eq(self.lo)
        ]

        with m.FSM():
            with m.State("IDLE"):
                with m.If(self.start):
                    m.d.sync += [
                        a_copy.eq(self.a),
                        b_copy.eq(self.b)
                    ]
                    m.next = "LOAD"

            with m.State("LOAD"):
                m.d.sync += [
                    self.lo.eq(0),
                    self.hi.eq(a_copy),
                    self.flag.eq(b_copy == 0),
                    iters_left.eq(self.width)
                ]

                # Rounds with a zero divisor pass their inputs through, so a
                # zero remainder here stays zero.
                with m.If(b_copy == 0):
                    m.d.sync += self.hi.eq(0)

                m.next = "STEP"

            with m.State("STEP"):
                m.d.sync += [
                    self.lo.eq(step.q_next),
                    self.hi.eq(step.r_next),
                    iters_left.eq(iters_left - 1)
                ]

                with m.If(iters_left == 1):
                    m.next = "DONE"

            with m.State("DONE"):
                m.d.comb += self.done.eq(1)
                m.next = "IDLE"

        return ResetInserter(self.rst)(m)
