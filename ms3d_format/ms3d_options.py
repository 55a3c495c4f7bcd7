"""Reader configuration."""

from dataclasses import dataclass


@dataclass
class DecodeOptions:
    """Options controlling how strictly an MS3D file is decoded."""

    # Files written before the ex-info sections existed end right after
    # the comments block. By default those sections decode as absent;
    # True makes a missing section a TruncatedError instead.
    require_ex_info: bool = False
