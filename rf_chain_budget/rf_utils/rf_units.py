#!/usr/bin/env python3
# -*- coding: utf-8 -*-

'''
Project: RF_chain_budget
RF Signal Chain Budget Calculator

This module provides the unit conversions between decibels and linear power ratios
used by the cascade computations.

Date: 2025-10-04
Version: 0.1
License: MIT
'''

__version__ = "0.1"

from typing import Union

import numpy as np

# ====================================================================================================
# Constants
# ====================================================================================================
DB_SENTINEL_THRESHOLD = 500.    # Above this value (dB), a ratio is considered as infinite
LINEAR_SENTINEL       = 1e300   # Large but finite ratio, keeps reciprocals and sums well-defined

# ====================================================================================================
# Utility Functions
# ====================================================================================================
def db_to_linear(value_db: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
    '''Convert a power ratio from dB to linear scale.

    Values above DB_SENTINEL_THRESHOLD and non-finite values are mapped to LINEAR_SENTINEL
    instead of overflowing to infinity.

    Args:
        value_db (Union[float, np.ndarray]): Ratio in dB (scalar or array).

    Returns:
        Union[float, np.ndarray]: Linear power ratio, G = 10^(dB/10).
    '''
    value_db = np.asarray(value_db, dtype=float)
    is_huge  = ~np.isfinite(value_db) | (value_db > DB_SENTINEL_THRESHOLD)
    safe_db  = np.where(is_huge, 0., value_db)  # Avoid overflow warnings on masked values
    ratio    = np.where(is_huge, LINEAR_SENTINEL, 10 ** (safe_db / 10.))

    return float(ratio) if ratio.ndim == 0 else ratio

def linear_to_db(ratio: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
    '''Convert a linear power ratio to dB.

    Args:
        ratio (Union[float, np.ndarray]): Linear power ratio (scalar or array).

    Returns:
        Union[float, np.ndarray]: Ratio in dB, -inf where ratio <= 0 (unbounded loss).
    '''
    ratio    = np.asarray(ratio, dtype=float)
    positive = ratio > 0
    safe     = np.where(positive, ratio, 1.)  # log10 only evaluated on positive values
    value_db = np.where(positive, 10 * np.log10(safe), -np.inf)

    return float(value_db) if value_db.ndim == 0 else value_db
