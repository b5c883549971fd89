#!/usr/bin/env python3
# -*- coding: utf-8 -*-

'''
Project: RF_chain_budget
RF Signal Chain Budget Calculator

Command line interface. Two sub-commands: 'budget' prints the cascade budget of the default chain
and 's2p' extracts one S-parameter column of a touchstone file.

Date: 2025-10-04
Version: 0.1
License: MIT
'''

__version__ = "0.1"

import argparse
import logging
import sys
from typing import List, Optional

from .rf_utils.rf_cascade import format_budget_table, format_result, plot_budget, stage_budget
from .rf_utils.rf_chain_manager import MAX_STAGES, RF_Chain_Manager
from .rf_utils.touchstone_table import DEFAULT_PARAM, DEFAULT_UNIT, PARAMS, Touchstone_Format_Error, Touchstone_Table

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='rf-chain-budget')
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging')
    sub = parser.add_subparsers(dest='cmd', required=True)

    p_budget = sub.add_parser('budget', help='Cascade budget of the default chain')
    p_budget.add_argument('--stages', type=int, default=None,
                          help=f'Resize the default chain to this number of stages (0-{MAX_STAGES})')
    p_budget.add_argument('--plot', action='store_true', help='Plot the cumulated budget')

    p_s2p = sub.add_parser('s2p', help='Extract one S-parameter column of a touchstone file')
    p_s2p.add_argument('file', help='Input touchstone file')
    p_s2p.add_argument('--param', default=DEFAULT_PARAM, choices=PARAMS)
    p_s2p.add_argument('--unit', default=DEFAULT_UNIT, help='Frequency unit of the data lines')
    p_s2p.add_argument('--freq-label', default='freq(Hz)', help='Header of the frequency column')
    p_s2p.add_argument('--header', default=None, help="Header of the value column, defaults to '<param>(dB)'")
    p_s2p.add_argument('-o', '--out', nargs='?', const='', default=None,
                       help="Output file, '<param>_export.txt' if given without a value")

    return parser


def _run_budget(args: argparse.Namespace) -> int:
    chain = RF_Chain_Manager()
    if args.stages is not None:
        chain.resize(args.stages)

    rows = stage_budget(chain.get_chain())
    print(format_budget_table(rows))
    print(format_result(chain.result))

    if args.plot:
        import matplotlib.pyplot as plt

        plot_budget(rows)
        plt.show()
    return 0


def _run_s2p(args: argparse.Namespace) -> int:
    try:
        table = Touchstone_Table.read_file(args.file, param=args.param, unit=args.unit,
                                           freq_label=args.freq_label, value_label=args.header)
    except (OSError, Touchstone_Format_Error) as err:
        logger.error(f"Conversion failed: {err}")
        return 1

    if args.out is None:
        print(table.to_text())
    else:
        table.write_text(args.out or None)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format='%(asctime)s-%(levelname)s-%(module)s-%(funcName)s: %(message)s')

    if args.cmd == 'budget':
        return _run_budget(args)

    if args.cmd == 's2p':
        return _run_s2p(args)

    parser.error(f"unknown command {args.cmd}")
    return 2


if __name__ == '__main__':
    sys.exit(main())
