#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Project: RF_chain_budget
RF Signal Chain Budget Calculator

Cascaded gain, noise figure (Friis) and 1dB compression point of a chain of amplifiers, filters,
attenuators, switches and mixers, plus a touchstone (S2P) column extractor.

Version: 0.1
License: MIT
"""

__version__ = "0.1"

from .rf_utils.rf_units import db_to_linear, linear_to_db
from .rf_utils.rf_stages import Stage_Type, Resolved_Stage, RF_Abstract_Stage, Amplifier, Filter, Attenuator, \
                                Switch, Mixer, make_stage, default_stage
from .rf_utils.rf_cascade import Cascade_Result, compute, stage_budget, format_result, format_budget_table
from .rf_utils.rf_chain_manager import RF_Chain_Manager, RF_Chain_Error, Invalid_Index_Error, MAX_STAGES, \
                                       move_index, initial_chain
from .rf_utils.touchstone_table import Touchstone_Table, Touchstone_Format_Error
