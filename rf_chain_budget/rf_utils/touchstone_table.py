#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Project: RF_chain_budget
Touchstone (S2P) Text Converter

This module defines the Touchstone_Table class for reading the text of a touchstone file and
extracting one S-parameter column as frequency/value pairs.

Usage:
- Initialize with the text (or read_file with a file path).
- Use to_text to get the "freq value" lines, or write_text to write them to a file.

Example:
    table = Touchstone_Table(text, param='S21', unit='MHz')
    print(table.to_text())
    table.write_text(table.default_filename())
"""

__version__ = "0.1"

import logging
import re
from typing import Dict, List, Optional

import numpy as np

logger = logging.getLogger(__name__)

# ====================================================================================================
# Constants
# ====================================================================================================
COMMENT_PREFIXES = ('!', '//', ';')
OPTION_PREFIX    = '#'
DEFAULT_UNIT     = 'MHz'
DEFAULT_PARAM    = 'S21'
PARAMS           = ('S11', 'S21', 'S12', 'S22')

_data_line_start = re.compile(r'^[\d\-\.+]')

# ====================================================================================================
# Exceptions
# ====================================================================================================
class Touchstone_Format_Error(ValueError):
    '''Raised when no value can be extracted from a touchstone text.'''

# ====================================================================================================
# Functions
# ====================================================================================================
def parse_number(token: str) -> float:
    '''Parse a numeric token (decimal comma accepted), NaN if it is not a number.'''
    try:
        return float(token.replace(',', '.'))
    except ValueError:
        return np.nan

def format_number(value: float, decimals: int = 3) -> str:
    '''Format a value rounded to decimals, without decimals when the rounded value is integral.'''
    value = round(value, decimals)
    if value == int(value):
        return f'{int(value)}'
    return f'{value}'

def build_mapping(n_tokens: int) -> Dict[str, int]:
    '''Get the column index of the frequency and of each S-parameter magnitude.

    Args:
        n_tokens (int): Number of tokens of a data line.

    Returns:
        Dict[str, int]: Column index by name ('freq', 'S11', 'S21', 'S12', 'S22').
    '''
    if n_tokens >= 9:
        # freq, S11 dB, S11 deg, S21 dB, S21 deg, S12 dB, S12 deg, S22 dB, S22 deg
        return {'freq': 0, 'S11': 1, 'S21': 3, 'S12': 5, 'S22': 7}
    elif n_tokens in (8, 5):
        # freq, S11 dB, S21 dB, S12 dB, S22 dB
        return {'freq': 0, 'S11': 1, 'S21': 2, 'S12': 3, 'S22': 4}
    # Single parameter export (freq, value[, phase]): every parameter is the 1st value
    return {'freq': 0, 'S11': 1, 'S21': 1, 'S12': 1, 'S22': 1}

# ====================================================================================================
# Touchstone Table Class
# ====================================================================================================
class Touchstone_Table(object):
    units_conversion = {
        'hz': (1., 'Hz'), 'khz': (1e3, 'Hz'), 'mhz': (1e6, 'Hz'), 'ghz': (1e9, 'Hz'),
    }

    def __init__(self, text: Optional[str] = None, param: str = DEFAULT_PARAM, unit: str = DEFAULT_UNIT,
                 freq_label: str = 'freq(Hz)', value_label: Optional[str] = None) -> None:
        """
        Initialize the Touchstone_Table object.

        Parameters:
        - text: Content of the touchstone file to parse.
        - param: S-parameter to extract (S11, S21, S12 or S22).
        - unit: Frequency unit of the data lines (Hz, kHz, MHz or GHz), overrides the option line.
        - freq_label: Header of the frequency column of the output.
        - value_label: Header of the value column of the output, defaults to '<param>(dB)'.
        """
        self.param       = param.upper()
        self.unit        = unit
        self.freq_label  = freq_label
        self.value_label = value_label if value_label else f'{self.param}(dB)'

        self.comments    = []    # Store comments of the touchstone text
        self.option_line = None  # Store the '#' option line
        self.header_unit = None  # Frequency unit announced by the option line
        self.data        = None  # Store the extracted data in a structured numpy array

        if self.param not in PARAMS:
            raise Touchstone_Format_Error(f"Parameter <{param}> not available, expected one of {PARAMS}")

        if text is not None:
            self.read_text(text)

    @classmethod
    def read_file(cls, filepath: str, **kwargs) -> 'Touchstone_Table':
        """
        Read a touchstone file and build a Touchstone_Table from its content.

        Parameters:
        - filepath: Path to the touchstone file.
        - kwargs: Keyword arguments of the Touchstone_Table constructor.
        """
        with open(filepath, 'r') as file:
            text = file.read()
        return cls(text, **kwargs)

    @staticmethod
    def convert_unit(unit: Optional[str]):
        """
        Get the factor to Hz of a frequency unit, unknown units fall back to MHz.

        Returns:
        - A tuple containing the conversion factor and the standard unit.
        """
        factor_unit = Touchstone_Table.units_conversion.get(str(unit).lower())
        if factor_unit is None:
            logger.warning(f"Unknown frequency unit <{unit}>, using {DEFAULT_UNIT}")
            factor_unit = Touchstone_Table.units_conversion[DEFAULT_UNIT.lower()]
        return factor_unit

    @staticmethod
    def split_lines(text: str) -> List[str]:
        return text.replace('\r', '').split('\n')

    @staticmethod
    def is_comment(line: str) -> bool:
        return line.strip().startswith(COMMENT_PREFIXES)

    @staticmethod
    def find_header_unit(lines: List[str]) -> Optional[str]:
        """
        Get the frequency unit of the first '#' option line mentioning one.

        Returns:
        - 'GHz', 'MHz', 'Hz', or None if no option line gives a unit.
        """
        for line in lines:
            line = line.strip()
            if line.startswith(OPTION_PREFIX):
                upper = line.upper()
                for unit in ('GHz', 'MHz', 'Hz'):
                    if unit.upper() in upper:
                        return unit
        return None

    @staticmethod
    def find_first_data_line(lines: List[str]) -> int:
        """
        Get the index of the first data line: starting like a number and holding at least
        two numeric tokens.

        Returns:
        - Index of the line, -1 if there is none.
        """
        for idx_line, line in enumerate(lines):
            line = line.strip()
            if not line or Touchstone_Table.is_comment(line):
                continue
            if _data_line_start.match(line):
                tokens = line.split()
                if np.count_nonzero(np.isfinite([parse_number(tok) for tok in tokens])) >= 2:
                    return idx_line
        return -1

    def read_text(self, text: str) -> 'Touchstone_Table':
        """
        Parse a touchstone text and extract the frequency and the chosen parameter.

        Parameters:
        - text: Content of the touchstone file.

        Raises:
        - Touchstone_Format_Error: If no data line is found or no value can be extracted.
        """
        self.comments    = []
        self.option_line = None
        self.header_unit = None
        self.data        = None

        lines = self.split_lines(text)

        for line in lines:
            line = line.strip()
            if self.is_comment(line):
                self.comments.append(line)
            elif line.startswith(OPTION_PREFIX) and self.option_line is None:
                self.option_line = line

        self.header_unit = self.find_header_unit(lines)
        if self.header_unit and self.header_unit.lower() != str(self.unit).lower():
            logger.warning(f"Option line announces <{self.header_unit}>, using <{self.unit}> as requested")

        idx_first = self.find_first_data_line(lines)
        if idx_first < 0:
            raise Touchstone_Format_Error("No data line found in the touchstone content.")

        mapping   = build_mapping(len(lines[idx_first].split()))
        idx_col   = mapping[self.param]
        factor, _ = self.convert_unit(self.unit)

        freqs, values = [], []
        for idx_line in range(idx_first, len(lines)):
            line = lines[idx_line].strip()
            if not line or self.is_comment(line):
                continue

            tokens = line.split()
            if len(tokens) <= idx_col:
                logger.debug(f"Line {idx_line + 1:03d}: missing values <{line}>")
                continue

            freq  = parse_number(tokens[mapping['freq']])
            value = parse_number(tokens[idx_col])
            if not (np.isfinite(freq) and np.isfinite(value)):
                logger.debug(f"Line {idx_line + 1:03d}: bad conversion <{line}>")
                continue

            freqs.append(freq * factor)
            values.append(value)

        if not freqs:
            raise Touchstone_Format_Error("No valid data extracted (check the format / units).")

        self._finalize_data_structure(freqs, values)
        return self

    def _finalize_data_structure(self, freqs: List[float], values: List[float]) -> None:
        """
        Finalize the data structure by converting lists to a structured numpy array.
        """
        dt = np.dtype([('freq', 'float'), ('value', 'float')])
        self.data = np.zeros(len(freqs), dtype=dt)
        self.data['freq']  = freqs
        self.data['value'] = values

    def to_text(self) -> str:
        """
        Get the converted text: a header line, then one "frequency(Hz) value" line per point.
        Frequencies are rounded to the Hz, values to 3 decimals.
        """
        if self.data is None:
            raise Touchstone_Format_Error("No data to convert.")

        lines = [f'{self.freq_label} {self.value_label}']
        for freq, value in zip(self.data['freq'], self.data['value']):
            lines.append(f'{int(round(freq))} {format_number(value)}')
        return '\n'.join(lines)

    def default_filename(self) -> str:
        return f'{self.param}_export.txt'

    def write_text(self, filepath: Optional[str] = None) -> str:
        """
        Write the converted text to a file.

        Parameters:
        - filepath: Path to the output file, defaults to '<param>_export.txt'.

        Returns:
        - The path of the written file.
        """
        filepath = filepath if filepath else self.default_filename()
        with open(filepath, 'w', encoding='utf-8') as file:
            file.write(self.to_text())
        logger.info(f"{len(self.data)} points written to <{filepath}>")
        return filepath

    def __len__(self) -> int:
        return 0 if self.data is None else len(self.data)

    def __str__(self):
        """
        Return a string representation of the Touchstone_Table object.
        """
        data_preview = "Data Preview (first 5 rows):\n"
        if self.data is not None:
            for freq, value in self.data[:5]:
                data_preview += f"  [{freq}, {value}]\n"
        else:
            data_preview += "  No data available.\n"

        comments_summary = "Comments:\n" + "\n".join(self.comments) if self.comments else "No comments."

        return (f"Touchstone_Table Summary:\n"
                f"Parameter: {self.param}, unit: {self.unit} (option line: {self.header_unit})\n"
                f"{data_preview}\n"
                f"{comments_summary}")
