# amaranth: UnusedElaboratable=no

import pytest
import warnings
from smolalu.params import check_width, check_sets, SizeWarning
from smolalu.add import RippleAdder
from smolalu.ctrl import DividerControl


@pytest.mark.parametrize("width", [1, 2, 256])
def test_good_width(width):
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        assert check_width(width) == width


@pytest.mark.parametrize("width", [0, -1, 1025])
def test_bad_width(width):
    with pytest.raises(ValueError):
        check_width(width)


@pytest.mark.parametrize("width", ["8", 8.0, True, None])
def test_width_type(width):
    with pytest.raises(TypeError):
        check_width(width)


def test_minimum_width():
    assert check_width(2, minimum=2) == 2
    with pytest.raises(ValueError):
        check_width(1, minimum=2)


@pytest.mark.parametrize("width", [257, 1024])
def test_wide_warns(width):
    with pytest.warns(SizeWarning):
        check_width(width)


def test_sets():
    assert check_sets(1) == 1
    assert check_sets(1000) == 1000
    with pytest.raises(ValueError):
        check_sets(0)
    with pytest.warns(SizeWarning):
        check_sets(501)


def test_cores_refuse_bad_width():
    with pytest.raises(ValueError):
        RippleAdder(0)
    with pytest.raises(TypeError):
        DividerControl("16")
    with pytest.warns(SizeWarning):
        RippleAdder(300)
