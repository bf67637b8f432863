# amaranth: UnusedElaboratable=no

import pytest
from itertools import product
from smolalu.shift import (BarrelShifter, ShiftControl, ShiftDirection,
                           ShiftMode, pack_shift)


def shift_model(w, x, direction, amount, fill, mode):
    mask = 2**w - 1
    k = min(amount, w)
    ones = (1 << k) - 1

    if direction == ShiftDirection.LEFT:
        f = fill if mode == ShiftMode.LOGICAL else 0
        o = ((x << k) | (f * ones)) & mask
        ovf = x >> (w - k)
    else:
        f = fill if mode == ShiftMode.LOGICAL else x >> (w - 1)
        o = (x >> k) | ((f * ones) << (w - k))
        ovf = x & ones

    return (o, ovf)


@pytest.mark.parametrize("mod", [BarrelShifter(4), BarrelShifter(5)],
                         ids=["w4", "w5"])
def test_all_values(sim, mod):
    m = mod
    w = m.width

    async def tb(ctx):
        # BarrelShifter(5).amount is 3 bits wide, so amounts 6 and 7 reach
        # the "shift everything out" default.
        for (x, amount, d, fill, mode) in product(
                range(2**w), range(2**len(m.amount)),
                ShiftDirection, (0, 1), ShiftMode):
            ctx.set(m.inp, x)
            ctx.set(m.amount, amount)
            ctx.set(m.dir, d)
            ctx.set(m.fill, fill)
            ctx.set(m.mode, mode)

            (o, ovf) = shift_model(w, x, d, amount, fill, mode)
            assert ctx.get(m.o) == o
            assert ctx.get(m.ovf) == ovf

    sim.run(testbenches=[tb])


@pytest.mark.parametrize("mod", [BarrelShifter(4)])
def test_zero_amount_is_noop(sim, mod):
    m = mod

    async def tb(ctx):
        ctx.set(m.amount, 0)
        for (x, d, fill, mode) in product(range(16), ShiftDirection, (0, 1),
                                          ShiftMode):
            ctx.set(m.inp, x)
            ctx.set(m.dir, d)
            ctx.set(m.fill, fill)
            ctx.set(m.mode, mode)

            assert ctx.get(m.o) == x
            assert ctx.get(m.ovf) == 0

    sim.run(testbenches=[tb])


@pytest.mark.parametrize("mod", [BarrelShifter(8)])
def test_round_trip(sim, mod):
    m = mod
    w = m.width

    async def tb(ctx):
        ctx.set(m.mode, ShiftMode.LOGICAL)
        ctx.set(m.fill, 0)

        for (x, k) in product(range(2**w), range(1, w - 1)):
            ctx.set(m.amount, k)
            ctx.set(m.dir, ShiftDirection.LEFT)
            ctx.set(m.inp, x)
            shifted = ctx.get(m.o)
            # Overflow of the left shift is the high k bits of x.
            assert ctx.get(m.ovf) == x >> (w - k)

            ctx.set(m.dir, ShiftDirection.RIGHT)
            ctx.set(m.inp, shifted)
            assert ctx.get(m.o) == x & (2**(w - k) - 1)

    sim.run(testbenches=[tb])


@pytest.mark.parametrize("mod", [BarrelShifter(8)])
def test_arithmetic_right_sign_extends(sim, mod):
    m = mod

    async def tb(ctx):
        ctx.set(m.mode, ShiftMode.ARITHMETIC)
        ctx.set(m.dir, ShiftDirection.RIGHT)
        # fill is ignored by arithmetic shifts.
        ctx.set(m.fill, 1)

        ctx.set(m.inp, 0b1001_0110)
        ctx.set(m.amount, 3)
        assert ctx.get(m.o) == 0b1111_0010
        assert ctx.get(m.ovf) == 0b110

        ctx.set(m.inp, 0b0001_0110)
        assert ctx.get(m.o) == 0b0000_0010
        assert ctx.get(m.ovf) == 0b110

        # And left shifts never take the fill bit.
        ctx.set(m.dir, ShiftDirection.LEFT)
        ctx.set(m.inp, 0b1001_0110)
        assert ctx.get(m.o) == 0b1011_0000
        assert ctx.get(m.ovf) == 0b100

    sim.run(testbenches=[tb])


def test_pack_shift():
    assert pack_shift(8, ShiftDirection.LEFT, 3) == 0b0000_0110
    assert pack_shift(8, ShiftDirection.RIGHT, 3, fill=1) == 0b1000_0111
    assert pack_shift(8, ShiftDirection.RIGHT, 63) == 0b0111_1111

    with pytest.raises(ValueError):
        pack_shift(8, ShiftDirection.LEFT, 64)
    with pytest.raises(ValueError):
        pack_shift(8, ShiftDirection.LEFT, 1, fill=2)
    # No room for both direction and fill.
    with pytest.raises(ValueError):
        pack_shift(1, ShiftDirection.LEFT, 0)


def test_shift_control_layout():
    layout = ShiftControl(8)
    assert layout.size == 8
    assert layout["direction"].offset == 0
    assert layout["amount"].offset == 1
    assert layout["amount"].shape.width == 6
    assert layout["fill"].offset == 7

    with pytest.raises(ValueError):
        ShiftControl(1)
