#!/usr/bin/env python3
# -*- coding: utf-8 -*-

'''
Project: RF_chain_budget
RF Signal Chain Budget Calculator

This module provides the stage models of an RF signal chain: amplifiers, filters, attenuators,
switches and mixers.

Key Features:
- One class per stage type, all sharing the same raw fields (gain, noise figure, insertion loss, OP1dB).
- Per-type resolution of the raw fields into the effective gain, noise figure and compression point.
- Sanitization of user entered fields (malformed values are replaced by defaults).

Date: 2025-10-04
Version: 0.1
License: MIT
'''

__version__ = "0.1"

import copy
import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import NamedTuple, Optional, Union

import numpy as np

logger = logging.getLogger(__name__)

# ====================================================================================================
# Constants
# ====================================================================================================

# Compression point at or above this value (dBm) is considered as non-limiting
P1DB_NON_LIMITING_THRESHOLD_DBM = 500.

# Default Parameters of a new stage
DEFAULT_STAGE_GAIN_DB           = 15.
DEFAULT_STAGE_NF_DB             = 3.
DEFAULT_STAGE_INSERTION_LOSS_DB = 1.
DEFAULT_STAGE_OP1DB_DBM         = 23.

FieldValue = Union[None, str, int, float]

# ====================================================================================================
# Stage Type
# ====================================================================================================
class Stage_Type(str, Enum):
    '''Closed enumeration of the stage types of a chain.'''
    AMPLIFIER  = 'amplifier'
    FILTER     = 'filter'
    ATTENUATOR = 'attenuator'
    SWITCH     = 'switch'
    MIXER      = 'mixer'

    @classmethod
    def from_string(cls, value: Union[str, 'Stage_Type']) -> 'Stage_Type':
        '''Get the stage type from its name, short aliases ('ampli', 'lna', 'atten') are accepted.

        Raises:
            ValueError: If the name is not a known stage type.
        '''
        if isinstance(value, cls):
            return value

        name = str(value).strip().lower()
        name = _STAGE_TYPE_ALIASES.get(name, name)
        try:
            return cls(name)
        except ValueError:
            raise ValueError(f"Unknown stage type <{value}>, expected one of {[t.value for t in cls]}") from None

_STAGE_TYPE_ALIASES = {'ampli': 'amplifier', 'lna': 'amplifier', 'atten': 'attenuator'}

# ====================================================================================================
# Field Sanitization
# ====================================================================================================
def parse_stage_field(value: FieldValue, default: Optional[float], field_name: str = 'field') -> Optional[float]:
    '''Parse a raw stage field into a float.

    Empty values give the default silently; values that do not parse as a number give the default
    with a warning. Decimal commas are accepted.

    Args:
        value (FieldValue): Raw value (number, text, or None).
        default (Optional[float]): Value substituted for empty or malformed input.
        field_name (str): Name of the field, used in log messages.

    Returns:
        Optional[float]: Parsed value or default.
    '''
    if value is None:
        return default

    if isinstance(value, str):
        text = value.strip()
        if not text:
            return default
        try:
            number = float(text.replace(',', '.'))
        except ValueError:
            logger.warning(f"Malformed {field_name} <{value}>, using {default}")
            return default
    else:
        try:
            number = float(value)
        except (TypeError, ValueError):
            logger.warning(f"Malformed {field_name} <{value!r}>, using {default}")
            return default

    if np.isnan(number):
        logger.warning(f"Malformed {field_name} <{value}>, using {default}")
        return default

    return number

def normalize_op1db(op1db_dbm: Optional[float]) -> Optional[float]:
    '''Map non-finite and very large compression points to None (non-limiting).'''
    if op1db_dbm is None or not np.isfinite(op1db_dbm) or op1db_dbm >= P1DB_NON_LIMITING_THRESHOLD_DBM:
        return None
    return op1db_dbm

# ====================================================================================================
# Resolved Stage
# ====================================================================================================
class Resolved_Stage(NamedTuple):
    '''Effective figures of a stage used by the cascade computations.

    Attributes:
        gain_db (float): Effective gain in dB (negative for lossy stages).
        nf_db (float): Effective noise figure in dB.
        op1db_dbm (Optional[float]): Output 1dB compression point in dBm, None if non-limiting.
    '''
    gain_db: float
    nf_db: float
    op1db_dbm: Optional[float]

# ====================================================================================================
# RF Stage Base Class
# ====================================================================================================
class RF_Abstract_Stage(ABC):
    '''Abstract base class for the stages of a chain.

    Every stage keeps all raw fields whatever its type, so that changing the type of a stage
    re-interprets the same data.

    Attributes:
        name (str): Display label.
        gain_db (float): Gain in dB (used by amplifiers).
        nf_db (Optional[float]): Noise figure in dB, None if not provided.
        insertion_loss_db (float): Insertion or conversion loss in dB (positive value).
        op1db_dbm (Optional[float]): Output 1dB compression point in dBm, None if non-limiting.
    '''
    stage_type: Stage_Type = None

    def __init__(self, name: str = '', gain_db: FieldValue = 0., nf_db: FieldValue = None,
                 insertion_loss_db: FieldValue = 0., op1db_dbm: FieldValue = None) -> None:
        '''Initialize the stage from raw field values.

        Args:
            name (str): Display label, defaults to ''.
            gain_db (FieldValue): Gain in dB, defaults to 0 (also used if malformed).
            nf_db (FieldValue): Noise figure in dB, defaults to None (derived from the other fields).
            insertion_loss_db (FieldValue): Insertion loss in dB, defaults to 0 (also used if malformed).
            op1db_dbm (FieldValue): Output 1dB compression point in dBm, defaults to None (non-limiting).
        '''
        self.name              = '' if name is None else str(name)
        self.gain_db           = parse_stage_field(gain_db, 0., 'gain_db')
        self.nf_db             = parse_stage_field(nf_db, None, 'nf_db')
        self.insertion_loss_db = parse_stage_field(insertion_loss_db, 0., 'insertion_loss_db')
        self.op1db_dbm         = normalize_op1db(parse_stage_field(op1db_dbm, None, 'op1db_dbm'))

        if self.insertion_loss_db < 0:
            logger.warning(f"<{self.name}> negative insertion loss {self.insertion_loss_db} dB, using its absolute value")
            self.insertion_loss_db = -self.insertion_loss_db

    @abstractmethod
    def resolve(self) -> Resolved_Stage:
        '''Get the effective gain, noise figure and compression point of the stage.'''
        pass

    def fields(self) -> dict:
        '''Get the raw fields of the stage as keyword arguments.'''
        return dict(name=self.name, gain_db=self.gain_db, nf_db=self.nf_db,
                    insertion_loss_db=self.insertion_loss_db, op1db_dbm=self.op1db_dbm)

    def with_type(self, stage_type: Union[str, Stage_Type]) -> 'RF_Abstract_Stage':
        '''Get a stage of another type carrying the same raw fields.'''
        return make_stage(stage_type, **self.fields())

    def copy(self) -> 'RF_Abstract_Stage':
        return copy.copy(self)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RF_Abstract_Stage):
            return NotImplemented
        return self.stage_type == other.stage_type and self.fields() == other.fields()

    def __repr__(self) -> str:
        args = ', '.join(f'{key}={val!r}' for key, val in self.fields().items())
        return f'{self.__class__.__name__}({args})'

# ====================================================================================================
# Amplifier Class
# ====================================================================================================
class Amplifier(RF_Abstract_Stage):
    '''Active stage: effective gain is gain_db, noise figure is nf_db (|gain_db| if not provided).'''
    stage_type = Stage_Type.AMPLIFIER

    def resolve(self) -> Resolved_Stage:
        nf_db = self.nf_db if self.nf_db is not None else abs(self.gain_db)
        return Resolved_Stage(self.gain_db, nf_db, self.op1db_dbm)

# ====================================================================================================
# Passive Stage Classes
# ====================================================================================================
class RF_Abstract_Passive_Stage(RF_Abstract_Stage, ABC):
    '''Passive stage: gain is -insertion_loss_db, noise figure equals the insertion loss.

    The nf_db field is kept but ignored.
    '''

    def resolve(self) -> Resolved_Stage:
        return Resolved_Stage(-self.insertion_loss_db, self.insertion_loss_db, self.op1db_dbm)

class Filter(RF_Abstract_Passive_Stage):
    stage_type = Stage_Type.FILTER

class Attenuator(RF_Abstract_Passive_Stage):
    stage_type = Stage_Type.ATTENUATOR

class Switch(RF_Abstract_Passive_Stage):
    stage_type = Stage_Type.SWITCH

# ====================================================================================================
# Mixer Class
# ====================================================================================================
class Mixer(RF_Abstract_Stage):
    '''Mixer stage: gain is -insertion_loss_db (conversion loss), noise figure is nf_db
    (conversion loss if not provided).'''
    stage_type = Stage_Type.MIXER

    def resolve(self) -> Resolved_Stage:
        nf_db = self.nf_db if self.nf_db is not None else self.insertion_loss_db
        return Resolved_Stage(-self.insertion_loss_db, nf_db, self.op1db_dbm)

# ====================================================================================================
# Stage Factory
# ====================================================================================================
STAGE_CLASSES = {cls.stage_type: cls for cls in (Amplifier, Filter, Attenuator, Switch, Mixer)}

_missing_types = set(Stage_Type) - set(STAGE_CLASSES)
if _missing_types:
    raise TypeError(f"No stage class for stage types {sorted(t.value for t in _missing_types)}")

def make_stage(stage_type: Union[str, Stage_Type], name: str = '', gain_db: FieldValue = 0., nf_db: FieldValue = None,
               insertion_loss_db: FieldValue = 0., op1db_dbm: FieldValue = None) -> RF_Abstract_Stage:
    '''Build a stage of the given type from raw field values.

    Raises:
        ValueError: If stage_type is not a known stage type.
    '''
    stage_class = STAGE_CLASSES[Stage_Type.from_string(stage_type)]
    return stage_class(name=name, gain_db=gain_db, nf_db=nf_db, insertion_loss_db=insertion_loss_db, op1db_dbm=op1db_dbm)

def default_stage(index: int) -> Amplifier:
    '''Get the stage appended when the chain grows, index is its 0-based position.'''
    return Amplifier(name=f'Stage {index+1}', gain_db=DEFAULT_STAGE_GAIN_DB, nf_db=DEFAULT_STAGE_NF_DB,
                     insertion_loss_db=DEFAULT_STAGE_INSERTION_LOSS_DB, op1db_dbm=DEFAULT_STAGE_OP1DB_DBM)
