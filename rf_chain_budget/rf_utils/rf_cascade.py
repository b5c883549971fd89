#!/usr/bin/env python3
# -*- coding: utf-8 -*-

'''
Project: RF_chain_budget
RF Signal Chain Budget Calculator

This module provides the cascade computations of an RF signal chain.

Key Features:
- Total gain of the chain.
- Cascaded noise figure (Friis formula).
- Cascaded output 1dB compression point and input-referred compression point.
- Per-stage budget trace, text rendering and visualization.

Undefined figures (empty chain, non-numeric intermediate results) are reported as None, never as 0 or NaN.

Date: 2025-10-04
Version: 0.1
License: MIT
'''

__version__ = "0.1"

import logging
from typing import List, NamedTuple, Optional, Sequence

import numpy as np

import matplotlib.pyplot as plt

from .rf_units import db_to_linear, linear_to_db
from .rf_stages import RF_Abstract_Stage, Resolved_Stage

logger = logging.getLogger(__name__)

UNDEFINED_PLACEHOLDER = '—'

# ====================================================================================================
# Results
# ====================================================================================================
class Cascade_Result(NamedTuple):
    '''Figures of a whole chain, each one is None when undefined.

    Attributes:
        total_gain_db (Optional[float]): Total gain in dB.
        total_nf_db (Optional[float]): Cascaded noise figure in dB.
        op1db_dbm (Optional[float]): Output 1dB compression point in dBm (+inf if no stage is limiting).
        ip1db_dbm (Optional[float]): Input-referred 1dB compression point in dBm.
    '''
    total_gain_db: Optional[float]
    total_nf_db: Optional[float]
    op1db_dbm: Optional[float]
    ip1db_dbm: Optional[float]

UNDEFINED_RESULT = Cascade_Result(None, None, None, None)

class Budget_Row(NamedTuple):
    '''One line of the budget trace: figures of a stage and of the chain up to its output.'''
    index: int
    name: str
    stage_type: str
    gain_db: float
    nf_db: float
    op1db_dbm: Optional[float]
    cumulated: Cascade_Result

# ====================================================================================================
# Utility Functions
# ====================================================================================================
def _defined(value: float) -> Optional[float]:
    '''Map NaN to None, keep finite and infinite values.'''
    value = float(value)
    return None if np.isnan(value) else value

def linear_figures(resolved: Sequence[Resolved_Stage]):
    '''Convert resolved stages to linear gains, noise factors and compression points.

    Non-limiting stages get an infinite compression point.

    Args:
        resolved (Sequence[Resolved_Stage]): Resolved stages in signal order.

    Returns:
        Tuple[np.ndarray, np.ndarray, np.ndarray]: Linear gains, noise factors, compression points.
    '''
    gains  = db_to_linear(np.array([stage.gain_db for stage in resolved], dtype=float))
    nf__s  = db_to_linear(np.array([stage.nf_db for stage in resolved], dtype=float))
    op1ds  = np.array([np.inf if stage.op1db_dbm is None else db_to_linear(stage.op1db_dbm) for stage in resolved], dtype=float)
    return gains, nf__s, op1ds

# ====================================================================================================
# Cascade Functions
# ====================================================================================================
def total_gain(resolved: Sequence[Resolved_Stage]) -> Optional[float]:
    '''Compute the total gain of the chain.

    Args:
        resolved (Sequence[Resolved_Stage]): Resolved stages in signal order.

    Returns:
        Optional[float]: Total gain in dB, None for an empty chain.
    '''
    if not len(resolved):
        return None

    gains, _, _ = linear_figures(resolved)
    with np.errstate(over='ignore', invalid='ignore'):
        gain = np.prod(gains)

    if np.isnan(gain):
        return None
    return _defined(linear_to_db(gain))

def cascaded_noise_figure(resolved: Sequence[Resolved_Stage]) -> Optional[float]:
    '''Compute the noise figure of the chain with the Friis formula.

    F = F0 + (F1 - 1)/G0 + (F2 - 1)/(G0.G1) + ...

    Args:
        resolved (Sequence[Resolved_Stage]): Resolved stages in signal order.

    Returns:
        Optional[float]: Noise figure in dB, None for an empty chain.
    '''
    if not len(resolved):
        return None

    gains, nf__s, _ = linear_figures(resolved)
    with np.errstate(over='ignore', under='ignore', divide='ignore', invalid='ignore'):
        gains_before = np.cumprod(gains)[:-1]  # Gain preceding each stage from the 2nd one
        nf_total     = nf__s[0] + np.sum((nf__s[1:] - 1.) / gains_before)

    if np.isnan(nf_total):
        return None
    return _defined(linear_to_db(nf_total))

def cascaded_output_p1db(resolved: Sequence[Resolved_Stage]) -> Optional[float]:
    '''Compute the output 1dB compression point of the chain.

    Each stage compression point is referred to the chain output through the gain of the stages
    after it, and the reciprocals are summed: 1/P = sum(1 / (P1_i . G_after_i)).
    Non-limiting stages do not contribute to the sum.

    Args:
        resolved (Sequence[Resolved_Stage]): Resolved stages in signal order.

    Returns:
        Optional[float]: Output compression point in dBm, +inf if no stage is limiting, None for an empty chain.
    '''
    if not len(resolved):
        return None

    gains, _, op1ds = linear_figures(resolved)
    with np.errstate(over='ignore', under='ignore', divide='ignore', invalid='ignore'):
        gains_after = np.append(np.cumprod(gains[::-1])[::-1][1:], 1.)  # Gain of the stages after each stage
        limiting    = np.isfinite(op1ds) & (op1ds > 0)
        inv_sum     = np.sum(1. / (op1ds[limiting] * gains_after[limiting]))

        if np.isnan(inv_sum):
            return None
        if inv_sum == 0:
            return np.inf

        return _defined(linear_to_db(1. / inv_sum))

def input_referred_p1db(op1db_dbm: Optional[float], total_gain_db: Optional[float]) -> Optional[float]:
    '''Refer the output compression point to the chain input: IP1dB = OP1dB - G.'''
    if op1db_dbm is None or total_gain_db is None:
        return None
    with np.errstate(invalid='ignore'):
        return _defined(np.float64(op1db_dbm) - np.float64(total_gain_db))

def compute_resolved(resolved: Sequence[Resolved_Stage]) -> Cascade_Result:
    '''Compute all figures of a chain of resolved stages.'''
    if not len(resolved):
        return UNDEFINED_RESULT

    gain_db  = total_gain(resolved)
    nf_db    = cascaded_noise_figure(resolved)
    op1db    = cascaded_output_p1db(resolved)
    ip1db    = input_referred_p1db(op1db, gain_db)

    return Cascade_Result(gain_db, nf_db, op1db, ip1db)

def compute(stages: Sequence[RF_Abstract_Stage]) -> Cascade_Result:
    '''Compute all figures of a chain.

    Args:
        stages (Sequence[RF_Abstract_Stage]): Stages in signal order.

    Returns:
        Cascade_Result: Total gain, noise figure, output and input compression points.
    '''
    resolved = [stage.resolve() for stage in stages]
    result   = compute_resolved(resolved)
    logger.debug(f'{len(resolved)} stages: {result}')
    return result

def stage_budget(stages: Sequence[RF_Abstract_Stage]) -> List[Budget_Row]:
    '''Compute the budget trace of a chain: resolved figures of each stage and cascade figures
    from the chain input to the output of each stage.

    Args:
        stages (Sequence[RF_Abstract_Stage]): Stages in signal order.

    Returns:
        List[Budget_Row]: One row per stage.
    '''
    resolved = [stage.resolve() for stage in stages]
    rows     = []
    for idx, (stage, figures) in enumerate(zip(stages, resolved)):
        rows.append(Budget_Row(index=idx, name=stage.name, stage_type=stage.stage_type.value,
                               gain_db=figures.gain_db, nf_db=figures.nf_db, op1db_dbm=figures.op1db_dbm,
                               cumulated=compute_resolved(resolved[:idx+1])))
    return rows

# ====================================================================================================
# Formatting Functions
# ====================================================================================================
def format_value(value: Optional[float], unit: str = '', decimals: int = 2) -> str:
    '''Format a figure for display, undefined values are shown as a placeholder.'''
    if value is None:
        text = UNDEFINED_PLACEHOLDER
    elif np.isfinite(value):
        text = f'{value:.{decimals}f}'
    else:
        text = '+inf' if value > 0 else '-inf'
    return f'{text} {unit}' if unit else text

def format_result(result: Cascade_Result) -> str:
    return '\n'.join((f"Total gain    : {format_value(result.total_gain_db, 'dB')}",
                      f"Noise figure  : {format_value(result.total_nf_db, 'dB')}",
                      f"OP1dB (output): {format_value(result.op1db_dbm, 'dBm')}",
                      f"IP1dB (input) : {format_value(result.ip1db_dbm, 'dBm')}"))

def format_budget_table(rows: Sequence[Budget_Row]) -> str:
    '''Render the budget trace as a text table.'''
    header = (f"{'#':>3} {'Name':<16} {'Type':<10} {'G(dB)':>8} {'NF(dB)':>8} {'OP1dB':>8} "
              f"{'cum G':>8} {'cum NF':>8} {'cum OP1':>8} {'cum IP1':>8}")
    lines  = [header, '-' * len(header)]
    for row in rows:
        cum = row.cumulated
        lines.append(f"{row.index+1:>3} {row.name[:16]:<16} {row.stage_type:<10} "
                     f"{format_value(row.gain_db):>8} {format_value(row.nf_db):>8} {format_value(row.op1db_dbm):>8} "
                     f"{format_value(cum.total_gain_db):>8} {format_value(cum.total_nf_db):>8} "
                     f"{format_value(cum.op1db_dbm):>8} {format_value(cum.ip1db_dbm):>8}")
    return '\n'.join(lines)

# ====================================================================================================
# Visualization Functions
# ====================================================================================================
def plot_budget(rows: Sequence[Budget_Row], title: str = "Chain Budget") -> None:
    '''Plot the cumulated gain, noise figure and compression points along the chain.

    Undefined and infinite values are not drawn.

    Args:
        rows (Sequence[Budget_Row]): Budget trace as returned by stage_budget.
        title (str): Plot title, defaults to "Chain Budget".
    '''
    def finite(values):
        values = np.array([np.nan if val is None else val for val in values], dtype=float)
        return np.where(np.isfinite(values), values, np.nan)

    stages_idx = np.arange(1, len(rows) + 1)
    labels     = [f'{row.index+1}\n{row.name}' for row in rows]

    fig, axes = plt.subplots(2, 1, figsize=(12, 6), sharex=True)

    axes[0].plot(stages_idx, finite([row.cumulated.total_gain_db for row in rows]), 'g-o', label='Gain')
    axes[0].plot(stages_idx, finite([row.cumulated.total_nf_db for row in rows]), 'k:o', label='NF')
    axes[0].set_ylabel('Gain, NF (dB)')
    axes[0].set_title(title)
    axes[0].legend()
    axes[0].grid(True)

    axes[1].plot(stages_idx, finite([row.cumulated.op1db_dbm for row in rows]), 'g:o', label='OP1dB')
    axes[1].plot(stages_idx, finite([row.cumulated.ip1db_dbm for row in rows]), 'r-o', label='IP1dB')
    axes[1].set_xticks(stages_idx)
    axes[1].set_xticklabels(labels)
    axes[1].set_xlabel('Stage')
    axes[1].set_ylabel('Compression point (dBm)')
    axes[1].legend()
    axes[1].grid(True)

    plt.tight_layout()
