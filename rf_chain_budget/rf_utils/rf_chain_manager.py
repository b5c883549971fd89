#!/usr/bin/env python3
# -*- coding: utf-8 -*-

'''
Project: RF_chain_budget
RF Signal Chain Budget Calculator

This module provides the stage list manager: the owner of the ordered stages of a chain.
Every mutation of the chain is followed by a full recomputation of the cascade figures,
which is returned to the caller.

Date: 2025-10-04
Version: 0.1
License: MIT
'''

__version__ = "0.1"

import logging
from typing import Callable, List, Optional, Sequence, Tuple, TypeVar, Union

from .rf_stages import RF_Abstract_Stage, Stage_Type, Filter, Amplifier, Mixer, default_stage, make_stage, \
                        parse_stage_field
from .rf_cascade import Cascade_Result, compute

logger = logging.getLogger(__name__)

T = TypeVar('T')

# ====================================================================================================
# Constants
# ====================================================================================================
MAX_STAGES    = 100  # Maximum number of stages of a chain
RESET_MESSAGE = 'Reset the whole chain?'

# ====================================================================================================
# Exceptions
# ====================================================================================================
class RF_Chain_Error(Exception):
    '''Base class of the errors reported by chain operations.'''

class Invalid_Index_Error(RF_Chain_Error, IndexError):
    '''Raised when an operation references a stage index out of the chain.'''

# ====================================================================================================
# Functions
# ====================================================================================================
def move_index(items: Sequence[T], from_index: int, to_index: int) -> List[T]:
    '''Move an item of a sequence to an insertion slot.

    to_index is the slot in the sequence before removal (0 is before the first item, len(items)
    after the last one). When the item comes from before the slot, removing it shifts the slot
    down by one, so it is reinserted at to_index - 1.

    Args:
        items (Sequence[T]): Items in their current order.
        from_index (int): Index of the item to move, in [0, len(items)).
        to_index (int): Insertion slot, in [0, len(items)].

    Returns:
        List[T]: New list with the item moved.

    Raises:
        Invalid_Index_Error: If an index is out of bounds.
    '''
    if not 0 <= from_index < len(items):
        raise Invalid_Index_Error(f"Source index {from_index} out of range [0, {len(items)})")
    if not 0 <= to_index <= len(items):
        raise Invalid_Index_Error(f"Destination index {to_index} out of range [0, {len(items)}]")

    new_items = list(items)
    moved     = new_items.pop(from_index)
    dest      = to_index - 1 if from_index < to_index else to_index
    new_items.insert(dest, moved)
    return new_items

def initial_chain() -> List[RF_Abstract_Stage]:
    '''Get the default chain: filter, LNA, filter, mixer, filter.'''
    return [
        Filter(   name='Filter 1', gain_db=0. , nf_db=1. , insertion_loss_db=1. , op1db_dbm=35.),
        Amplifier(name='LNA 1'   , gain_db=20., nf_db=1. , insertion_loss_db=0. , op1db_dbm=18.),
        Filter(   name='Filter 2', gain_db=0. , nf_db=0.8, insertion_loss_db=0.8, op1db_dbm=38.),
        Mixer(    name='Mixer 1' , gain_db=0. , nf_db=6. , insertion_loss_db=6. , op1db_dbm=10.),
        Filter(   name='Filter 3', gain_db=0. , nf_db=1. , insertion_loss_db=1. , op1db_dbm=40.),
    ]

# ====================================================================================================
# Stage List Manager Class
# ====================================================================================================
class RF_Chain_Manager:
    '''Owner of the ordered stages of a chain.

    Attributes:
        result (Cascade_Result): Figures of the current chain, recomputed after each mutation.
    '''
    OPERATIONS = ('append', 'remove_at', 'move', 'resize', 'reset', 'update_stage')

    def __init__(self, stages: Optional[Sequence[RF_Abstract_Stage]] = None) -> None:
        '''Initialize the manager.

        Args:
            stages (Optional[Sequence[RF_Abstract_Stage]]): Initial stages, defaults to the default chain.
                Stages beyond MAX_STAGES are dropped.
        '''
        stages = initial_chain() if stages is None else [self._adopt(stage) for stage in stages]
        if len(stages) > MAX_STAGES:
            logger.warning(f"{len(stages)} stages given, chain capped to {MAX_STAGES}")
        self._stages = list(stages[:MAX_STAGES])
        self.result  = self._recompute()

    def __len__(self) -> int:
        return len(self._stages)

    @staticmethod
    def _adopt(stage: RF_Abstract_Stage) -> RF_Abstract_Stage:
        '''Rebuild a caller stage from its raw fields, so that fields edited after construction are sanitized.'''
        return make_stage(stage.stage_type, **stage.fields())

    def _recompute(self) -> Cascade_Result:
        self.result = compute(self._stages)
        return self.result

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self._stages):
            logger.warning(f"Invalid stage index {index}, chain has {len(self._stages)} stages")
            raise Invalid_Index_Error(f"Stage index {index} out of range [0, {len(self._stages)})")

    def get_chain(self) -> Tuple[RF_Abstract_Stage, ...]:
        '''Get a snapshot of the stages, modifying it does not affect the chain.'''
        return tuple(stage.copy() for stage in self._stages)

    def append(self, stage: Optional[RF_Abstract_Stage] = None) -> Cascade_Result:
        '''Append a stage at the end of the chain (a default amplifier if stage is None).

        Nothing is done if the chain already has MAX_STAGES stages.
        '''
        if len(self._stages) >= MAX_STAGES:
            logger.warning(f"Chain is full ({MAX_STAGES} stages), stage not appended")
            return self._recompute()

        stage = default_stage(len(self._stages)) if stage is None else self._adopt(stage)
        self._stages.append(stage)
        return self._recompute()

    def remove_at(self, index: int) -> Cascade_Result:
        '''Remove the stage at index, next stages are shifted down by one.

        Raises:
            Invalid_Index_Error: If index is out of the chain, the chain is left unchanged.
        '''
        self._check_index(index)
        del self._stages[index]
        return self._recompute()

    def move(self, from_index: int, to_index: int) -> Cascade_Result:
        '''Move the stage at from_index to the insertion slot to_index (see move_index).

        Raises:
            Invalid_Index_Error: If an index is out of bounds, the chain is left unchanged.
        '''
        try:
            self._stages = move_index(self._stages, from_index, to_index)
        except Invalid_Index_Error as err:
            logger.warning(f"Move {from_index} -> {to_index} rejected: {err}")
            raise
        return self._recompute()

    def resize(self, target_length: int) -> Cascade_Result:
        '''Grow the chain with default stages or truncate it from the end.

        target_length is clamped to [0, MAX_STAGES], a malformed value gives an empty chain.
        '''
        target = parse_stage_field(target_length, 0., 'target_length')
        length = int(max(0, min(MAX_STAGES, target)))
        if length != target:
            logger.warning(f"Chain length {target_length} clamped to {length}")

        while len(self._stages) < length:
            self._stages.append(default_stage(len(self._stages)))
        del self._stages[length:]
        return self._recompute()

    def reset(self, confirm: Optional[Callable[[str], bool]] = None) -> Cascade_Result:
        '''Replace the chain with the default chain.

        Args:
            confirm (Optional[Callable[[str], bool]]): Called with a question, the chain is kept
                unchanged if it returns False. Defaults to None (no confirmation).
        '''
        if confirm is not None and not confirm(RESET_MESSAGE):
            logger.info("Reset cancelled")
            return self._recompute()

        self._stages = initial_chain()
        return self._recompute()

    def update_stage(self, index: int, stage_type: Union[None, str, Stage_Type] = None, **fields) -> Cascade_Result:
        '''Edit the fields of a stage, and optionally its type.

        Raw values are sanitized like any input (see parse_stage_field). Changing the type keeps
        all the fields, only their interpretation changes.

        Args:
            index (int): Index of the stage.
            stage_type (Union[None, str, Stage_Type]): New type, defaults to None (type unchanged).
            **fields: New values among name, gain_db, nf_db, insertion_loss_db, op1db_dbm.

        Raises:
            Invalid_Index_Error: If index is out of the chain.
            ValueError: If stage_type is unknown.
            TypeError: If a field name is unknown.
        '''
        self._check_index(index)
        stage = self._stages[index]

        unknown = set(fields) - set(stage.fields())
        if unknown:
            raise TypeError(f"Unknown stage fields {sorted(unknown)}")

        new_fields = dict(stage.fields(), **fields)
        new_type   = stage.stage_type if stage_type is None else Stage_Type.from_string(stage_type)
        self._stages[index] = make_stage(new_type, **new_fields)
        return self._recompute()

    def mutate(self, operation: str, *args, **kwargs) -> Cascade_Result:
        '''Apply an operation by name (one of OPERATIONS) and return the new figures.

        Raises:
            ValueError: If the operation is unknown.
            RF_Chain_Error: If the operation fails, the chain is left unchanged.
        '''
        if operation not in self.OPERATIONS:
            raise ValueError(f"Unknown chain operation <{operation}>, expected one of {self.OPERATIONS}")
        return getattr(self, operation)(*args, **kwargs)
