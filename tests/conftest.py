import matplotlib

matplotlib.use("Agg")

import pytest

from rf_chain_budget.rf_utils.rf_stages import Amplifier, Filter


@pytest.fixture
def lna():
    return Amplifier(name="LNA", gain_db=20., nf_db=1., op1db_dbm=10.)


@pytest.fixture
def lossy_filter():
    return Filter(name="Filter", insertion_loss_db=3.)
