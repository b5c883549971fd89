"""Tests for the stage types and the per-type resolution of their fields."""

import math

import pytest

from rf_chain_budget.rf_utils.rf_stages import (
    STAGE_CLASSES,
    Amplifier,
    Attenuator,
    Filter,
    Mixer,
    Resolved_Stage,
    Stage_Type,
    Switch,
    default_stage,
    make_stage,
    normalize_op1db,
    parse_stage_field,
)


def test_every_stage_type_has_a_class():
    assert set(STAGE_CLASSES) == set(Stage_Type)
    for stage_type, stage_class in STAGE_CLASSES.items():
        assert stage_class.stage_type is stage_type


class TestResolve:
    def test_amplifier(self):
        assert Amplifier(gain_db=20., nf_db=1.5, insertion_loss_db=4., op1db_dbm=18.).resolve() == \
            Resolved_Stage(20., 1.5, 18.)

    def test_amplifier_without_nf_uses_gain_magnitude(self):
        assert Amplifier(gain_db=-5.).resolve().nf_db == 5.
        assert Amplifier(gain_db=12.).resolve().nf_db == 12.

    def test_amplifier_zero_nf_is_kept(self):
        assert Amplifier(gain_db=12., nf_db=0.).resolve().nf_db == 0.

    @pytest.mark.parametrize("stage_class", [Filter, Attenuator, Switch])
    def test_passive_stages(self, stage_class):
        stage = stage_class(gain_db=30., nf_db=9., insertion_loss_db=2.5, op1db_dbm=35.)
        assert stage.resolve() == Resolved_Stage(-2.5, 2.5, 35.)

    def test_mixer(self):
        assert Mixer(gain_db=30., nf_db=8., insertion_loss_db=6.).resolve() == Resolved_Stage(-6., 8., None)

    def test_mixer_without_nf_uses_conversion_loss(self):
        assert Mixer(insertion_loss_db=7.).resolve().nf_db == 7.

    def test_mixer_zero_nf_is_kept(self):
        assert Mixer(nf_db=0., insertion_loss_db=7.).resolve().nf_db == 0.


class TestCompressionPoint:
    @pytest.mark.parametrize("op1db_dbm", [None, 500., 1000., math.inf, "", "1e3"])
    def test_non_limiting(self, op1db_dbm):
        assert Amplifier(op1db_dbm=op1db_dbm).resolve().op1db_dbm is None

    def test_limiting_below_threshold(self):
        assert Amplifier(op1db_dbm=499.5).resolve().op1db_dbm == 499.5

    def test_normalize(self):
        assert normalize_op1db(None) is None
        assert normalize_op1db(-math.inf) is None
        assert normalize_op1db(-10.) == -10.


class TestFieldParsing:
    @pytest.mark.parametrize("value, expected", [(3, 3.), ("2.5", 2.5), (" 1,5 ", 1.5), ("-4", -4.)])
    def test_numbers(self, value, expected):
        assert parse_stage_field(value, 0.) == expected

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_empty_gives_default(self, value):
        assert parse_stage_field(value, 7.) == 7.

    @pytest.mark.parametrize("value", ["abc", "1.2.3", object(), "nan"])
    def test_malformed_gives_default(self, value, caplog):
        assert parse_stage_field(value, 0., "gain_db") == 0.
        assert "Malformed gain_db" in caplog.text

    def test_malformed_stage_fields(self):
        stage = Amplifier(gain_db="abc", nf_db="?", insertion_loss_db="x", op1db_dbm="n/a")
        assert (stage.gain_db, stage.nf_db, stage.insertion_loss_db, stage.op1db_dbm) == (0., None, 0., None)

    def test_negative_insertion_loss_is_made_positive(self):
        assert Filter(insertion_loss_db=-3.).insertion_loss_db == 3.


class TestStageType:
    @pytest.mark.parametrize("name, stage_type", [
        ("amplifier", Stage_Type.AMPLIFIER), ("ampli", Stage_Type.AMPLIFIER), ("LNA", Stage_Type.AMPLIFIER),
        ("Filter", Stage_Type.FILTER), ("atten", Stage_Type.ATTENUATOR), (" switch ", Stage_Type.SWITCH),
        ("mixer", Stage_Type.MIXER), (Stage_Type.MIXER, Stage_Type.MIXER),
    ])
    def test_from_string(self, name, stage_type):
        assert Stage_Type.from_string(name) is stage_type

    def test_unknown(self):
        with pytest.raises(ValueError, match="Unknown stage type"):
            Stage_Type.from_string("circulator")


def test_make_stage():
    stage = make_stage("atten", name="Pad", insertion_loss_db=6.)
    assert isinstance(stage, Attenuator)
    assert stage.name == "Pad"
    assert stage.resolve() == Resolved_Stage(-6., 6., None)


def test_with_type_keeps_the_raw_fields(lna):
    as_filter = lna.with_type("filter")
    assert isinstance(as_filter, Filter)
    assert as_filter.fields() == lna.fields()
    assert as_filter.with_type(Stage_Type.AMPLIFIER) == lna


def test_copy_is_independent(lna):
    other = lna.copy()
    other.gain_db = 3.
    assert lna.gain_db == 20.


def test_equality_depends_on_type():
    assert Filter(insertion_loss_db=1.) == Filter(insertion_loss_db=1.)
    assert Filter(insertion_loss_db=1.) != Attenuator(insertion_loss_db=1.)


def test_default_stage():
    stage = default_stage(4)
    assert isinstance(stage, Amplifier)
    assert stage.name == "Stage 5"
    assert stage.resolve() == Resolved_Stage(15., 3., 23.)
