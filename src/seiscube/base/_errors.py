"""Custom Errors."""

import logging

logger = logging.getLogger(__name__)


class UnsupportedCubeError(Exception):
    """The cube (or the pair of cubes) has a structure this package cannot handle."""

    def __init__(self, error_message: str):
        """__init__."""
        logger.error(error_message)


class AxisNotFoundError(UnsupportedCubeError):
    """None of the accepted names of an axis role is present in the cube."""

    def __init__(self, error_message: str):
        """__init__."""
        logger.error(error_message)


class UnhandledAxisError(UnsupportedCubeError):
    """Axis lookup that does not match any of the resolved axes."""

    def __init__(self, error_message: str):
        """__init__."""
        logger.error(error_message)


class BadRequestError(Exception):
    """The caller asked for an invalid combination (e.g. two incompatible cubes)."""

    def __init__(self, error_message: str):
        """__init__."""
        logger.error(error_message)
