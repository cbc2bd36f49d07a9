# grange.py - genomic range/interval routine.


from intervaltree import IntervalTree


class Region:
    """Region class

    Attributes
    ----------
    chrom : str
        Chromosome name.
    start : int
        1-based start pos, inclusive.
    end : int
        1-based end pos, exclusive.
    """
    def __init__(self, chrom, start, end):
        self.chrom = format_chrom(chrom)
        self.start = start
        self.end = end


class ScoredRegion(Region):
    """Region carrying a DAR score.

    Attributes
    ----------
    score : float
        The DAR value of the region.
    """
    def __init__(self, chrom, start, end, score):
        super().__init__(chrom, start, end)
        self.score = score


class RegionSet:
    """Region set with payload

    Attributes
    ----------
    ctree : dict
        Intervaltree for each chromosome.
    """
    def __init__(self):
        self.ctree = {}

    def add(self, region):
        """Add a new region.

        Parameters
        ----------
        region : `Region` object.
            The region to be added.

        Returns
        -------
        int
            return code. 0 success, -1 error.
        """
        if region.end <= region.start:
            return(-1)
        chrom = format_chrom(region.chrom)
        if chrom not in self.ctree:
            self.ctree[chrom] = IntervalTree()
        self.ctree[chrom][region.start:region.end] = region
        return(0)

    def fetch(self, chrom, start, end):
        """Fetch overlapping regions.

        Parameters
        ----------
        chrom : str
            Chromosome name.
        start : int
            1-based start pos, inclusive.
        end : int
            1-based end pos, exclusive.

        Returns
        -------
        list
            All overlapping regions (not sorted).
        """
        chrom = format_chrom(chrom)
        if chrom not in self.ctree or end <= start:
            return([])
        tree = self.ctree[chrom]
        hits = [region for begin, end, region in tree[start:end]]
        return(hits)


def format_chrom(chrom):
    chrom = str(chrom)
    return chrom[3:] if chrom.lower().startswith("chr") else chrom


def format_start(x, base = 1):
    x = int(x)
    if x < base:
        x = base
    return(x)


def format_end(x, base = 1):
    x = int(x)
    if x < base:
        x = base
    return(x)


def reg2str(chrom, start, end, base = 1):
    chrom = format_chrom(chrom)
    start = format_start(start, base = base)
    end = format_end(end, base = base)
    s = None
    if end >= REG_MAX_POS:
        s = "%s:%s-" % (chrom, start)
    else:
        s = "%s:%s-%s" % (chrom, start, end)
    return(s)


def str2tuple(s):
    """Convert a string of genomic region into 3-element tuple.

    Parameters
    ----------
    s : str
        The string of genomic region, e.g., "chr1:1001-2000", "1:1001" or
        "chr1".

    Returns
    -------
    tuple
        A tuple of 3 elements: chrom (str), start (int), and end (int).
        `None` if the input `s` is invalid.
    """
    if s is None or not isinstance(s, str):
        return(None)
    if len(s) <= 0:
        return(None)
    if ":" in s:
        if s.count(":") != 1:
            return(None)
        chrom, coord = s.split(":")
        if len(chrom) <= 0:
            return(None)
        if len(coord) <= 0:
            return((chrom, None, None))
        if "-" in coord:
            if coord.count("-") != 1:
                return(None)
            start, end = coord.split("-")
            if len(start) <= 0:
                start = None
            else:
                try:
                    start = int(start)
                except ValueError:
                    return(None)
            if len(end) <= 0:
                end = None
            else:
                try:
                    end = int(end)
                except ValueError:
                    return(None)
            return((chrom, start, end))
        else:
            try:
                start = int(coord)
            except ValueError:
                return(None)
            else:
                return((chrom, start, None))
    else:
        chrom = s
        if "-" in chrom:
            return(None)
        else:
            return((chrom, None, None))


REG_MAX_POS = 0x7fffffff    # same with setting of pysam
