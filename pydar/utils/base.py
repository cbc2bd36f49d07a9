# base.py - basic utils.


import numpy as np
import os


def assert_e(path):
    """Assert file or folder exists, mimicking shell "test -e"."""
    assert path is not None and os.path.exists(path)


def assert_n(x):
    """Assert `x` has content, mimicking shell "test -n"."""
    assert x is not None and len(x) > 0



def is_function(x):
    """Test whether `x` is a function."""
    return hasattr(x, "__call__")


def is_scalar_numeric(x):
    """Test whether `x` is a scalar numeric value."""
    return isinstance(x, (int, float, np.integer, np.floating)) and \
        not isinstance(x, bool)


def is_odd(x):
    """Test whether `x` is an odd integer."""
    return isinstance(x, (int, np.integer)) and not isinstance(x, bool) and \
        x % 2 == 1
