"""Replicate a single-lane core over concatenated buses."""

from amaranth import Module, Shape, Value
from amaranth.lib.wiring import In, Component

from .params import check_sets, check_width


class Lanes(Component):  # noqa: DOC602,DOC603
    r"""Run ``sets`` independent copies of a core side by side.

    Every port of the lane's signature appears on the wrapper with the same
    name and direction, ``sets`` times as wide. Lane :math:`i` sees bits
    :math:`[i*w, (i+1)*w)` of each bus, where :math:`w` is the width of the
    corresponding lane port.

    .. doctest::

        >>> from smolalu.add import RippleAdder
        >>> from smolalu.lanes import Lanes
        >>> adders = Lanes(RippleAdder, width=8, sets=4)
        >>> len(adders.a), len(adders.co)
        (32, 4)

    Parameters
    ----------
    lane : callable
        Factory returning a fresh :class:`~amaranth:amaranth.lib.wiring.Component`
        when called as ``lane(width)``. Only combinational cores make sense
        here; clocked lanes would all share one clock domain.
    width : int
        Operand width passed to each lane.
    sets : int
        Number of lanes.

    Attributes
    ----------
    width : int
        Operand width of each lane.
    sets : int
        Number of lanes.
    lanes : list
        The lane instances, in bus order.
    """

    def __init__(self, lane, width=8, sets=1):
        self.width = check_width(width)
        self.sets = check_sets(sets)
        self.lanes = [lane(self.width) for _ in range(self.sets)]

        members = {}
        for name, member in self.lanes[0].signature.members.items():
            if not member.is_port:
                raise TypeError(f"lane port {name!r} is not a plain signal; "
                                "only flat signatures can be replicated")
            lane_width = Shape.cast(member.shape).width
            members[name] = member.flow(lane_width * self.sets)

        super().__init__(members)

    def elaborate(self, platform):  # noqa: D102
        m = Module()

        for i, lane in enumerate(self.lanes):
            m.submodules[f"lane{i}"] = lane

            for name, member in lane.signature.members.items():
                # Strip any enum or layout view down to its raw bits.
                port = Value.cast(getattr(lane, name))
                w = len(port)
                bus = getattr(self, name)[i*w:(i + 1)*w]

                if member.flow == In:
                    m.d.comb += port.eq(bus)
                else:
                    m.d.comb += bus.eq(port)

        return m
