"""Logging utilities of pyGMC."""

import logging

LGR = logging.getLogger("GENERAL")
RefLGR = logging.getLogger("REFERENCES")

LOG_FORMAT = "%(asctime)s\t%(module)s.%(funcName)-12s\t%(levelname)-8s\t%(message)s"
STREAM_FORMAT = "%(levelname)-8s %(module)s:%(funcName)s:%(lineno)d %(message)s"


def setup_loggers(logname=None, refname=None, quiet=False, debug=False):
    """Set up the pyGMC loggers.

    The solvers log to the "GENERAL" logger (e.g., the lambda and iteration count of
    each solve) and cite their references on the "REFERENCES" logger. Nothing is
    configured on import; call this function to see the messages.

    Parameters
    ----------
    logname : str, optional
        Name of the tab-separated log file, by default None
    refname : str, optional
        Name of the file the references are written to, by default None
    quiet : bool, optional
        Whether to only report warnings and errors, by default False
    debug : bool, optional
        Whether to report the residual of every iteration, by default False
    """
    if logname:
        log_handler = logging.FileHandler(logname)
        log_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S"))
        LGR.addHandler(log_handler)

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(logging.Formatter(STREAM_FORMAT))
    LGR.addHandler(stream_handler)

    if quiet:
        LGR.setLevel(logging.WARNING)
    elif debug:
        LGR.setLevel(logging.DEBUG)
    else:
        LGR.setLevel(logging.INFO)

    if refname:
        ref_handler = logging.FileHandler(refname)
        ref_handler.setFormatter(logging.Formatter("%(message)s"))
        RefLGR.setLevel(logging.INFO)
        RefLGR.addHandler(ref_handler)
        RefLGR.propagate = False


def teardown_loggers():
    """Remove the handlers added by ``setup_loggers``."""
    for local_logger in (RefLGR, LGR):
        for handler in local_logger.handlers[:]:
            handler.close()
            local_logger.removeHandler(handler)
    RefLGR.propagate = True
