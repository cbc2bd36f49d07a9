# contrast.py - contrasts between sample groups.


import re

from logging import error


# one term of a contrast expression, e.g., "-0.5*grp".
TERM_PATTERN = re.compile(
    r"\s*([+-])?\s*(?:(\d+(?:\.\d*)?|\.\d+)\s*\*\s*)?([A-Za-z_][\w.]*)\s*")



def parse_contrast(expr):
    """Parse one contrast expression.

    Parameters
    ----------
    expr : str
        A linear combination of group names, e.g., "wt-mut" or
        "0.5*a + 0.5*b - c".

    Returns
    -------
    dict of {str : float}
        Keys are group names and values are their coefficients.
        Coefficients of a group referenced more than once are summed.
    """
    if not isinstance(expr, str) or len(expr.strip()) <= 0:
        error("contrast should be a non-empty str.")
        raise ValueError
    coefs = {}
    pos = 0
    while pos < len(expr):
        m = TERM_PATTERN.match(expr, pos)
        if m is None or m.end() == pos or (pos > 0 and m.group(1) is None):
            error("invalid contrast expression '%s'." % expr)
            raise ValueError
        sign = -1.0 if m.group(1) == "-" else 1.0
        coef = float(m.group(2)) if m.group(2) is not None else 1.0
        grp = m.group(3)
        coefs[grp] = coefs.get(grp, 0.0) + sign * coef
        pos = m.end()
    return(coefs)


def make_contrasts(*exprs, **named):
    """Construct contrasts from expressions.

    Parameters
    ----------
    *exprs : str
        Contrast expressions, see :func:`parse_contrast()`.
        Each contrast is named by its expression with blanks removed.
    **named : str
        Named contrast expressions, e.g., `treat = "mut-wt"`.

    Returns
    -------
    dict of {str : dict of {str : float}}
        Keys are contrast names and values are the group coefficients.

    Examples
    --------
    >>> make_contrasts("wt-mut", both = "0.5*a+0.5*b-c")
    {'wt-mut': {'wt': 1.0, 'mut': -1.0}, 'both': {'a': 0.5, 'b': 0.5, 'c': -1.0}}
    """
    res = {}
    for expr in exprs:
        name = re.sub(r"\s+", "", expr) if isinstance(expr, str) else expr
        res[name] = parse_contrast(expr)
    for name, expr in named.items():
        res[name] = parse_contrast(expr)
    return(res)


def format_contrasts(contrasts):
    """Format contrasts into a dict of group coefficients.

    Parameters
    ----------
    contrasts : dict or list of str or str
        Either a dict of {contrast name : dict of {group : coefficient}},
        or contrast expression(s), see :func:`make_contrasts()`.

    Returns
    -------
    dict of {str : dict of {str : float}}
        The formatted contrasts.
    """
    if isinstance(contrasts, str):
        return(make_contrasts(contrasts))
    if isinstance(contrasts, (list, tuple)):
        return(make_contrasts(*contrasts))
    if not isinstance(contrasts, dict) or len(contrasts) <= 0:
        error("contrasts should be a non-empty dict or list of str.")
        raise ValueError
    res = {}
    for name, coefs in contrasts.items():
        if isinstance(coefs, str):
            coefs = parse_contrast(coefs)
        if not isinstance(coefs, dict):
            error("coefficients of contrast '%s' should be a dict." % name)
            raise ValueError
        res[name] = {grp: float(c) for grp, c in coefs.items()}
    return(res)


def check_contrast(name, coefs, groups):
    """Check one contrast against the available groups.

    Parameters
    ----------
    name : str
        Contrast name.
    coefs : dict of {str : float}
        Group coefficients of the contrast.
    groups : list of str
        Names of the available groups.

    Returns
    -------
    dict of {str : float}
        Coefficients of the groups participating in the contrast, i.e.,
        with non-zero coefficients.
    """
    coefs = {grp: c for grp, c in coefs.items() if c != 0}
    if len(coefs) < 2:
        error("contrast '%s' should compare at least 2 groups." % name)
        raise ValueError
    if not any([c > 0 for c in coefs.values()]) or \
            not any([c < 0 for c in coefs.values()]):
        error("contrast '%s' should have both positive and negative " \
            "coefficients." % name)
        raise ValueError
    missing = [grp for grp in coefs.keys() if grp not in groups]
    if len(missing) > 0:
        error("groups %s of contrast '%s' not found." % (str(missing), name))
        raise ValueError
    return(coefs)


def get_max_norm(coefs):
    """The largest norm of the weighted difference of proportion vectors.

    With `a` the sum of positive coefficients and `b` the absolute sum of
    negative ones, the norm of `sum(c_g * p_g)` is at most
    `sqrt(a^2 + b^2)`, reached when the two sides are fixed on two
    different alleles, e.g., `sqrt(2)` for a "+1/-1" contrast.
    """
    a = sum([c for c in coefs.values() if c > 0])
    b = -sum([c for c in coefs.values() if c < 0])
    return((a ** 2 + b ** 2) ** 0.5)
