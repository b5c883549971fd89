#!/usr/bin/env python3
# -*- coding: utf-8 -*-

'''
Project: RF_chain_budget
RF Signal Chain Budget Calculator

Example of a receiver front-end: antenna switch, preselection filter, LNA, attenuator, image filter
and mixer, edited through the stage list manager.

python -m rf_chain_budget.rf_chains.rf_chain_example

Date: 2025-10-04
Version: 0.1
License: MIT
'''

import logging
import matplotlib.pyplot as plt

from ..rf_utils.rf_stages import Switch, Filter, Amplifier, Attenuator, Mixer
from ..rf_utils.rf_cascade import stage_budget, format_budget_table, format_result, plot_budget
from ..rf_utils.rf_chain_manager import RF_Chain_Manager

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------------------------------
sp4t          = Switch(    name='SP4T'       , insertion_loss_db=1.  , op1db_dbm=39.)

hp_filter     = Filter(    name='HP filter'  , insertion_loss_db=0.5 )

amplifier_lna = Amplifier( name='LNA'        , gain_db=16., nf_db=3. , op1db_dbm=20.)

attenuator    = Attenuator(name='Attenuator' , insertion_loss_db=5.  )

amplifier     = Amplifier( name='Driver'     , gain_db=20., nf_db=7. , op1db_dbm=24.)

bp_filter     = Filter(    name='BP filter'  , insertion_loss_db=2.  , op1db_dbm=40.)

mixer         = Mixer(     name='Mixer'      , insertion_loss_db=7.  , nf_db=8., op1db_dbm=12.)
# -----------------------------------------------------------------------------------------------------

# -----------------------------------------------------------------------------------------------------
stages = [ sp4t, hp_filter, amplifier_lna, attenuator, amplifier, bp_filter, mixer ]
chain  = RF_Chain_Manager(stages)
# -----------------------------------------------------------------------------------------------------


# ====================================================================================================
# Main Execution
# ====================================================================================================
def main() -> None:
    '''Main function to demonstrate the usage of the chain budget classes.'''
    logging.basicConfig(level=logging.INFO, format='%(asctime)s-%(levelname)s-%(module)s-%(funcName)s: %(message)s')

    # ---------------------------------------------------------------
    logger.info(  "====================================================" )
    logger.info( f"=========== Assessing chain of {len(chain)} stages" )
    logger.info(  "====================================================" )
    for line in format_budget_table(stage_budget(chain.get_chain())).splitlines():
        logger.info(line)
    for line in format_result(chain.result).splitlines():
        logger.info(line)
    # ---------------------------------------------------------------

    # ---------------------------------------------------------------
    # Move the attenuator before the LNA: the noise figure gets worse
    result = chain.move(3, 2)
    logger.info( f"Attenuator before LNA -> NF: {result.total_nf_db:.2f} dB, IP1dB: {result.ip1db_dbm:.2f} dBm" )

    # Turn the attenuator into a filter with the same loss: figures are unchanged
    result = chain.update_stage(2, stage_type='filter')
    logger.info( f"Attenuator as filter  -> NF: {result.total_nf_db:.2f} dB, IP1dB: {result.ip1db_dbm:.2f} dBm" )

    # Back to the default chain
    result = chain.reset()
    logger.info( f"Default chain         -> Gain: {result.total_gain_db:.2f} dB, NF: {result.total_nf_db:.2f} dB" )
    # ---------------------------------------------------------------

    plot_budget(stage_budget(chain.get_chain()), title="Default Chain Budget")
    plt.show()  # Display all plots

if __name__ == '__main__':
    main()
# ====================================================================================================
