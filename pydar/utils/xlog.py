# xlog.py - logging.


import logging
import sys


def init_logging(
    fn = None,
    mode = "w",
    stream = None,
    fh_level = logging.DEBUG,
    ch_level = logging.INFO
):
    """Initialize the root logger.

    Parameters
    ----------
    fn : str or None, default None
        Path to the log file. `None` means not logging into file.
    mode : str, default "w"
        Mode for opening the log file.
    stream : file object or None, default None
        The console stream, e.g., `sys.stdout`.
        If `None`, it will be set as `sys.stderr`.
    fh_level : int, default logging.DEBUG
        Logging level of the file handler.
    ch_level : int, default logging.INFO
        Logging level of the console handler.

    Returns
    -------
    logging.Logger
        The root logger.
    """
    if stream is None:
        stream = sys.stderr

    fmt = logging.Formatter(
        "[%(levelname)s] %(asctime)s - %(message)s",
        datefmt = "%Y-%m-%d %H:%M:%S"
    )

    logger = logging.getLogger()
    logger.setLevel(min(fh_level, ch_level) if fn else ch_level)

    # avoid duplicated records when called more than once.
    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()

    if fn:
        fh = logging.FileHandler(fn, mode = mode)
        fh.setLevel(fh_level)
        fh.setFormatter(fmt)
        logger.addHandler(fh)

    ch = logging.StreamHandler(stream)
    ch.setLevel(ch_level)
    ch.setFormatter(fmt)
    logger.addHandler(ch)

    return(logger)
