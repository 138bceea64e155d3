"""Tests for household file loading and CLI > config > default resolution."""

import tomllib
from datetime import date

import pytest
from household_sim.catalogs import DEFAULT_CATALOG_ID
from household_sim.config import (
    DEFAULTS,
    build_household,
    build_params,
    create_parser,
    load_config,
    resolve,
)
from household_sim.models import AGE_YEARS, LIFE_EVENT, MONTHLY, PLANNED_CHILD, SELF

HOUSEHOLD_TOML = """
start_date = 2024-01-01
end_age = 65
inflation_rate = 3.0
default_inflation_rate = 2.0

[[accounts]]
id = "pension"
name = "Pension"
balance = 120000
annual_return = 5.0
monthly_deposit = 1500

[[members]]
id = "me"
name = "Dana"
type = "self"
birth_date = 1990-05-12

[[members]]
id = "baby"
name = "Baby"
type = "planned_child"
expected_birth_date = "2026-06-01"

[[income]]
member = "me"
amount = 18000
effective_date = 2024-01-01

[[catalogs]]
id = "lean"
name = "Lean"

[[catalogs.rules]]
name = "Daycare"
trigger = "age_years"
value = 1
value_end = 3
amount = 2500
recurrence = "monthly"

[[assignments]]
child = "baby"
catalog = "lean"

[[goals]]
id = "flat"
name = "Flat"
target_amount = 400000
target_date = 2032-01-01
account = "pension"

[[withdrawals]]
date = 2029-06-01
amount = 60000
description = "Car"

[[yearly_expenses]]
name = "Vacation"
amount = 8000
"""


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "household.toml"
    path.write_text(HOUSEHOLD_TOML)
    return path


class TestLoadConfig:
    def test_missing_file(self, tmp_path):
        assert load_config(tmp_path / "nope.toml") == {}

    def test_invalid_toml_exits(self, tmp_path, capsys):
        path = tmp_path / "bad.toml"
        path.write_text("accounts = [")
        with pytest.raises(SystemExit):
            load_config(path)
        assert "Failed to read config file" in capsys.readouterr().err

    def test_loads_tables(self, config_file):
        raw = load_config(config_file)
        assert raw["accounts"][0]["id"] == "pension"
        assert raw["start_date"] == date(2024, 1, 1)


class TestResolve:
    def test_priority(self, config_file):
        raw = load_config(config_file)
        args = create_parser("test").parse_args(["--inflation-rate", "4.5"])
        r = resolve(args, raw)
        assert r["inflation_rate"] == 4.5              # CLI
        assert r["end_age"] == 65                       # config
        assert r["withdrawal_policy"] == DEFAULTS["withdrawal_policy"]  # default

    def test_exclude_planned_children_flag(self):
        args = create_parser("test").parse_args(["--exclude-planned-children"])
        assert resolve(args, {})["include_planned_children"] is False
        args = create_parser("test").parse_args([])
        assert resolve(args, {})["include_planned_children"] is True


class TestBuildHousehold:
    def setup_method(self):
        self.raw = tomllib.loads(HOUSEHOLD_TOML)
        self.household = build_household(self.raw)

    def test_accounts(self):
        [account] = self.household.accounts
        assert account.balance == 120000.0
        assert account.monthly_deposit == 1500.0
        assert account.management_fee == 0.0

    def test_members_dates(self):
        me, baby = self.household.members
        assert me.member_type == SELF
        assert me.birth_date == date(1990, 5, 12)
        assert baby.member_type == PLANNED_CHILD
        assert baby.expected_birth_date == date(2026, 6, 1)

    def test_catalogs_include_default(self):
        ids = [c.id for c in self.household.catalogs]
        assert ids == ["lean", DEFAULT_CATALOG_ID]
        [rule] = self.household.catalogs[0].rules
        assert rule.trigger == AGE_YEARS
        assert rule.recurrence == MONTHLY
        assert rule.trigger_value_end == 3
        assert rule.id == "lean-1"

    def test_assignments_and_goals(self):
        assert self.household.assignments == {"baby": "lean"}
        [goal] = self.household.goals
        assert goal.linked_account_id == "pension"
        assert goal.target_date == date(2032, 1, 1)

    def test_household_inflation(self):
        assert self.household.inflation_rate == 2.0

    def test_missing_required_key(self):
        with pytest.raises(ValueError, match="missing 'id'"):
            build_household({"accounts": [{"name": "No id"}]})

    def test_bad_date(self):
        with pytest.raises(ValueError, match="invalid date"):
            build_household({"members": [{"id": "x", "type": "child", "birth_date": "2024-13-01"}]})

    def test_empty_file(self):
        household = build_household({})
        assert household.accounts == []
        assert [c.id for c in household.catalogs] == [DEFAULT_CATALOG_ID]

    @pytest.mark.parametrize(
        "spelling, expected", [("life_event", LIFE_EVENT), ("age_in_years", AGE_YEARS), ("age_years", AGE_YEARS)],
    )
    def test_trigger_spellings(self, spelling, expected):
        raw = {"catalogs": [{"id": "c", "name": "C", "rules": [
            {"name": "Graduation", "trigger": spelling, "value": 18, "amount": 500, "recurrence": "once"},
        ]}]}
        [rule] = build_household(raw).catalogs[0].rules
        assert rule.trigger == expected


class TestBuildParams:
    def test_from_config(self, config_file):
        raw = load_config(config_file)
        r = resolve(create_parser("test").parse_args([]), raw)
        params = build_params(r, raw)
        assert params.start_date == date(2024, 1, 1)
        assert params.end_date is None
        assert params.end_age == 65
        assert params.inflation_rate == 3.0
        assert params.withdrawal_events[0].amount == 60000.0
        assert params.withdrawal_events[0].account_id is None
        assert params.yearly_expenses[0].month == 7
        assert params.yearly_expenses[0].adjust_for_inflation

    def test_cli_dates(self):
        args = create_parser("test").parse_args(["--start-date", "2025-03-01", "--end-date", "2030-03-01"])
        params = build_params(resolve(args, {}), {})
        assert params.start_date == date(2025, 3, 1)
        assert params.end_date == date(2030, 3, 1)
        assert params.inflation_rate is None

    def test_start_defaults_to_today(self):
        params = build_params(resolve(create_parser("test").parse_args([]), {}), {})
        assert params.start_date == date.today()
        assert params.today == date.today()

    def test_explicit_today(self):
        args = create_parser("test").parse_args(["--start-date", "2025-03-01", "--today", "2026-01-01"])
        assert build_params(resolve(args, {}), {}).today == date(2026, 1, 1)
