"""Construction-time parameter checks shared by all cores."""

import warnings


MAX_WIDTH = 1024
WARN_WIDTH = 256
MAX_SETS = 1000
WARN_SETS = 500


class SizeWarning(UserWarning):
    """Emitted when a core is asked to elaborate an unusually large design."""


def _check_int(name, value):
    # bool is an int subclass, but width=True is almost certainly a mistake.
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an integer, not {value!r}")


def check_width(width, minimum=1):
    """Validate the operand width of a core.

    Parameters
    ----------
    width : int
        Requested width in bits.
    minimum : int, optional
        Smallest width the calling core can elaborate.

    Returns
    -------
    int
        ``width``, unchanged.

    Raises
    ------
    TypeError
        If ``width`` is not an integer.
    ValueError
        If ``width`` lies outside ``[minimum, MAX_WIDTH]``.
    """
    _check_int("width", width)
    if not minimum <= width <= MAX_WIDTH:
        raise ValueError(f"width must be in [{minimum}, {MAX_WIDTH}], "
                         f"got {width}")
    if width > WARN_WIDTH:
        warnings.warn(f"width {width} is above {WARN_WIDTH}; elaboration and "
                      "simulation will be slow", SizeWarning, stacklevel=3)
    return width


def check_sets(sets):
    """Validate the lane count of a batch wrapper.

    Parameters
    ----------
    sets : int
        Number of independent lanes.

    Returns
    -------
    int
        ``sets``, unchanged.

    Raises
    ------
    TypeError
        If ``sets`` is not an integer.
    ValueError
        If ``sets`` lies outside ``[1, MAX_SETS]``.
    """
    _check_int("sets", sets)
    if not 1 <= sets <= MAX_SETS:
        raise ValueError(f"sets must be in [1, {MAX_SETS}], got {sets}")
    if sets > WARN_SETS:
        warnings.warn(f"{sets} lanes is above {WARN_SETS}; elaboration and "
                      "simulation will be slow", SizeWarning, stacklevel=3)
    return sets
