"""
Configuration constants for the sparse matrix recommender.

This module centralizes defaults shared by the builder, scoring and
introspection functions. A few values can be overridden via environment
variables.
"""
import os
import logging

import numpy as np

logger = logging.getLogger(__name__)

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


def _get_int_env(key: str, default: int, min_val: int = 1) -> int:
    """
    Safely parse integer from environment variable with validation.

    Args:
        key: Environment variable name
        default: Default value if not set or invalid
        min_val: Minimum allowed value

    Returns:
        Validated integer value
    """
    try:
        val = int(os.environ.get(key, default))
        if val < min_val:
            logger.warning(f"{key}={val} is below minimum {min_val}, using {min_val}")
            return min_val
        return val
    except ValueError:
        logger.warning(f"Invalid {key}='{os.environ.get(key)}', using default {default}")
        return default


def _get_bool_env(key: str, default: bool) -> bool:
    """Parse a boolean flag such as ``1``/``true``/``off`` from the environment."""
    raw = os.environ.get(key)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    logger.warning(f"Invalid {key}='{raw}', using default {default}")
    return default


# Scoring defaults
DEFAULT_NRECS = _get_int_env("SMREC_DEFAULT_NRECS", 10, min_val=1)

# Progress bars while building per-tag-type matrices
SHOW_PROGRESS = _get_bool_env("SMREC_SHOW_PROGRESS", False)

# Column names of the tables handed back to callers
SCORE_COLUMN = "Score"
INDEX_COLUMN = "Index"
DEFAULT_ITEM_LABEL = "Item"
TAG_LABEL = "Tag"
METADATA_LABEL = "Metadata"
WEIGHT_LABEL = "Weight"

# Field holding the rating in history rows
DEFAULT_RATING_FIELD = "Rating"

# Returned by tag_type() when an identifier maps to nothing
NO_TAG_TYPE = "None"

# Storage type of the metadata matrices
MATRIX_DTYPE = np.float64
