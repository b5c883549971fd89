"""Tests for the cascade computations: total gain, Friis noise figure and compression points."""

import math

import matplotlib.pyplot as plt
import pytest

from rf_chain_budget.rf_utils.rf_cascade import (
    UNDEFINED_RESULT,
    Cascade_Result,
    cascaded_noise_figure,
    cascaded_output_p1db,
    compute,
    format_budget_table,
    format_result,
    format_value,
    input_referred_p1db,
    plot_budget,
    stage_budget,
    total_gain,
)
from rf_chain_budget.rf_utils.rf_chain_manager import initial_chain
from rf_chain_budget.rf_utils.rf_stages import Amplifier, Attenuator, Filter, Mixer, Resolved_Stage, Switch


def nf_db(*stages):
    """Hand-written Friis formula over (gain_db, nf_db) pairs."""
    factor, gain = 10 ** (stages[0][1] / 10), 10 ** (stages[0][0] / 10)
    for stage_gain_db, stage_nf_db in stages[1:]:
        factor += (10 ** (stage_nf_db / 10) - 1) / gain
        gain *= 10 ** (stage_gain_db / 10)
    return 10 * math.log10(factor)


CHAINS = [
    [Amplifier(gain_db=20., nf_db=1., op1db_dbm=10.)],
    [Filter(insertion_loss_db=1., op1db_dbm=35.), Amplifier(gain_db=20., nf_db=1., op1db_dbm=18.)],
    initial_chain(),
    [Switch(insertion_loss_db=0.7, op1db_dbm=30.), Amplifier(gain_db=15., nf_db=2.), Attenuator(insertion_loss_db=3.),
     Amplifier(gain_db=12., nf_db=5., op1db_dbm=20.), Mixer(insertion_loss_db=7., op1db_dbm=8.)],
]


def test_empty_chain_is_undefined():
    assert compute([]) == UNDEFINED_RESULT
    assert total_gain([]) is None
    assert cascaded_noise_figure([]) is None
    assert cascaded_output_p1db([]) is None


@pytest.mark.parametrize("gain_db, noise_db", [(20., 1.), (13.7, 2.3), (-4.2, 6.), (0., 0.)])
def test_single_amplifier(gain_db, noise_db):
    result = compute([Amplifier(gain_db=gain_db, nf_db=noise_db)])
    assert result.total_gain_db == pytest.approx(gain_db, abs=1e-9)
    assert result.total_nf_db == pytest.approx(noise_db, abs=1e-9)


def test_friis_two_amplifiers():
    result = compute([Amplifier(gain_db=20., nf_db=1.), Amplifier(gain_db=10., nf_db=3.)])
    expected = 10 * math.log10(10 ** 0.1 + (10 ** 0.3 - 1) / 10 ** 2)
    assert result.total_nf_db == pytest.approx(expected, abs=1e-9)
    assert result.total_gain_db == pytest.approx(30.)


def test_default_chain():
    result = compute(initial_chain())
    assert result.total_gain_db == pytest.approx(11.2)
    assert result.total_nf_db == pytest.approx(nf_db((-1., 1.), (20., 1.), (-0.8, 0.8), (-6., 6.), (-1., 1.)))


def test_noise_figure_depends_on_order(lna, lossy_filter):
    filter_first = compute([lossy_filter, lna]).total_nf_db
    lna_first = compute([lna, lossy_filter]).total_nf_db
    assert filter_first == pytest.approx(nf_db((-3., 3.), (20., 1.)))
    assert lna_first == pytest.approx(nf_db((20., 1.), (-3., 3.)))
    assert filter_first != pytest.approx(lna_first)


def test_output_p1db_referred_through_following_gain():
    result = compute([Amplifier(gain_db=20., nf_db=1., op1db_dbm=10.), Filter(insertion_loss_db=3.)])
    assert result.op1db_dbm == pytest.approx(7.)
    assert result.total_gain_db == pytest.approx(17.)
    assert result.ip1db_dbm == pytest.approx(-10.)


def test_output_p1db_of_two_limiting_stages():
    # Two 10 dBm stages with a lossless link: output compression point halved
    result = compute([Amplifier(gain_db=0., op1db_dbm=10.), Amplifier(gain_db=0., op1db_dbm=10.)])
    assert result.op1db_dbm == pytest.approx(10. - 10 * math.log10(2))


def test_all_stages_non_limiting():
    result = compute([Filter(insertion_loss_db=1.), Amplifier(gain_db=10., op1db_dbm=1000.)])
    assert result.op1db_dbm == math.inf
    assert result.ip1db_dbm == math.inf
    assert result.total_gain_db == pytest.approx(9.)


@pytest.mark.parametrize("chain", CHAINS)
@pytest.mark.parametrize("position", ["first", "last"])
def test_lossless_non_limiting_stage_changes_nothing(chain, position):
    reference = compute(chain)
    neutral = Filter(name="Neutral", insertion_loss_db=0.)
    extended = [neutral] + list(chain) if position == "first" else list(chain) + [neutral]
    result = compute(extended)
    assert result.total_nf_db == pytest.approx(reference.total_nf_db, abs=1e-12)
    assert result.op1db_dbm == pytest.approx(reference.op1db_dbm, abs=1e-12)


def test_type_switch_reuses_fields():
    amplifier = Amplifier(gain_db=20., nf_db=1., insertion_loss_db=3.)
    as_filter = amplifier.with_type("filter")
    assert compute([amplifier]).total_gain_db == pytest.approx(20.)
    assert compute([as_filter]).total_gain_db == pytest.approx(-3.)
    assert compute([as_filter]).total_nf_db == pytest.approx(3.)


def test_non_finite_gain_does_not_raise():
    result = compute([Amplifier(gain_db=math.inf, nf_db=1.), Amplifier(gain_db=600., nf_db=2., op1db_dbm=10.)])
    assert result.total_gain_db == math.inf
    assert result.total_nf_db == pytest.approx(1.)
    assert result.op1db_dbm == pytest.approx(10.)
    assert result.ip1db_dbm == -math.inf


def test_input_referred_p1db():
    assert input_referred_p1db(None, 10.) is None
    assert input_referred_p1db(10., None) is None
    assert input_referred_p1db(math.inf, math.inf) is None
    assert input_referred_p1db(math.inf, 10.) == math.inf
    assert input_referred_p1db(12., 10.) == pytest.approx(2.)


def test_functions_accept_resolved_stages():
    resolved = [Resolved_Stage(20., 1., None), Resolved_Stage(-3., 3., 15.)]
    assert total_gain(resolved) == pytest.approx(17.)
    assert cascaded_output_p1db(resolved) == pytest.approx(15.)


class TestBudget:
    def test_rows(self):
        rows = stage_budget(initial_chain())
        assert [row.name for row in rows] == ["Filter 1", "LNA 1", "Filter 2", "Mixer 1", "Filter 3"]
        assert rows[0].stage_type == "filter"
        assert rows[0].gain_db == -1.
        assert rows[1].cumulated.total_gain_db == pytest.approx(19.)
        assert rows[-1].cumulated == compute(initial_chain())

    def test_empty(self):
        assert stage_budget([]) == []

    def test_table(self):
        table = format_budget_table(stage_budget(initial_chain()))
        lines = table.splitlines()
        assert len(lines) == 2 + 5
        assert "LNA 1" in lines[3]
        assert "amplifier" in lines[3]

    def test_plot(self):
        plt.close("all")
        plot_budget(stage_budget(initial_chain() + [Filter(name="Last", insertion_loss_db=1.)]), title="Budget")
        assert len(plt.get_fignums()) == 1
        assert plt.gcf().axes[0].get_title() == "Budget"
        plt.close("all")


class TestFormat:
    @pytest.mark.parametrize("value, unit, text", [
        (None, "dB", "— dB"), (1.234, "dB", "1.23 dB"), (math.inf, "dBm", "+inf dBm"),
        (-math.inf, "", "-inf"), (0., "", "0.00"),
    ])
    def test_format_value(self, value, unit, text):
        assert format_value(value, unit) == text

    def test_format_undefined_result(self):
        text = format_result(UNDEFINED_RESULT)
        assert text.count("—") == 4
        assert "0.00" not in text
        assert "nan" not in text

    def test_format_result(self):
        text = format_result(Cascade_Result(11.2, 2.346, math.inf, math.inf))
        assert "11.20 dB" in text
        assert "2.35 dB" in text
        assert "+inf dBm" in text
