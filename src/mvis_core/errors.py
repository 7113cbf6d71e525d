"""MVIS archive errors."""


class FormatError(ValueError):
    """Archive content or naming that cannot be trusted.

    Raised for a bad magic header, a truncated frame, an archive path lacking
    the UPI delimiter, or an out-of-range sequence counter.
    """
