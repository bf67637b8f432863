# amaranth: UnusedElaboratable=no

import pytest
import random
from itertools import product
from smolalu.add import RippleAdder, RippleSubtractor, Comparator


@pytest.mark.parametrize("mod", [RippleAdder(4)])
def test_adder_all_values(sim, mod):
    m = mod

    async def tb(ctx):
        for (a, b, ci) in product(range(16), range(16), (0, 1)):
            ctx.set(m.a, a)
            ctx.set(m.b, b)
            ctx.set(m.ci, ci)

            assert ctx.get(m.o) == (a + b + ci) % 16
            assert ctx.get(m.co) == int(a + b + ci >= 16)

    sim.run(testbenches=[tb])


@pytest.mark.parametrize("mod", [RippleSubtractor(4)])
def test_subtractor_all_values(sim, mod):
    m = mod

    async def tb(ctx):
        for (a, b) in product(range(16), range(16)):
            ctx.set(m.a, a)
            ctx.set(m.b, b)

            assert ctx.get(m.o) == (a - b) % 16
            assert ctx.get(m.bo) == int(a < b)

    sim.run(testbenches=[tb])


@pytest.mark.parametrize("mod", [RippleSubtractor(4)])
def test_subtractor_borrow_in(sim, mod):
    m = mod

    async def tb(ctx):
        ctx.set(m.bi, 1)
        for (a, b) in product(range(16), range(16)):
            ctx.set(m.a, a)
            ctx.set(m.b, b)

            assert ctx.get(m.o) == (a - b - 1) % 16
            assert ctx.get(m.bo) == int(a < b + 1)

    sim.run(testbenches=[tb])


@pytest.mark.parametrize("mod,values", [
    (RippleAdder(4), (0b0111, 0b0001, 0b1000, 0)),
    (RippleAdder(4), (0b1111, 0b0001, 0b0000, 1)),
    (RippleSubtractor(4), (0b0000, 0b0001, 0b1111, 1)),
    (RippleSubtractor(4), (0b1000, 0b0011, 0b0101, 0))],
    ids=["add", "add_carry", "sub_borrow", "sub"])
def test_reference(sim, mod, values):
    m = mod
    (a, b, o, c) = values

    async def tb(ctx):
        ctx.set(m.a, a)
        ctx.set(m.b, b)

        assert ctx.get(m.o) == o
        if isinstance(m, RippleAdder):
            assert ctx.get(m.co) == c
        else:
            assert ctx.get(m.bo) == c

    sim.run(testbenches=[tb])


@pytest.mark.parametrize("mod", [RippleAdder(32), RippleSubtractor(32)],
                         ids=["add32", "sub32"])
def test_random(sim, mod):
    m = mod
    random.seed(0)

    async def tb(ctx):
        for _ in range(256):
            a = random.randint(0, 2**32 - 1)
            b = random.randint(0, 2**32 - 1)
            ctx.set(m.a, a)
            ctx.set(m.b, b)

            if isinstance(m, RippleAdder):
                assert ctx.get(m.o) == (a + b) % 2**32
                assert ctx.get(m.co) == int(a + b >= 2**32)
            else:
                assert ctx.get(m.o) == (a - b) % 2**32
                assert ctx.get(m.bo) == int(a < b)

    sim.run(testbenches=[tb])


@pytest.mark.parametrize("mod", [Comparator(4)])
def test_comparator_all_values(sim, mod):
    m = mod

    async def tb(ctx):
        for (a, b) in product(range(16), range(16)):
            ctx.set(m.a, a)
            ctx.set(m.b, b)

            assert ctx.get(m.lt) == int(a < b)
            assert ctx.get(m.gt) == int(a > b)
            assert ctx.get(m.equal) == int(a == b)
            # Exactly one relation holds.
            assert ctx.get(m.lt) + ctx.get(m.gt) + ctx.get(m.equal) == 1

    sim.run(testbenches=[tb])
