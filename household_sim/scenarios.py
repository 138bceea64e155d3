"""Scenario definitions and multi-scenario execution."""

import dataclasses

from household_sim.models import Household, SimulationParams, SimulationResult
from household_sim.simulation import simulate_household

# inflation_rate: %/year applied to the run
# return_shift: percentage points added to every account's annual_return
SCENARIOS = {
    "low": {
        "inflation_rate": 1.5,
        "return_shift": -2.0,
    },
    "standard": {
        "inflation_rate": 2.5,
        "return_shift": 0.0,
    },
    "high": {
        "inflation_rate": 3.5,
        "return_shift": 1.5,
    },
    "stagflation": {
        # Real returns squeezed from both sides
        "inflation_rate": 5.0,
        "return_shift": -3.0,
    },
}


def apply_scenario(
    household: Household, params: SimulationParams, scenario: dict,
) -> tuple[Household, SimulationParams]:
    """Copies of household and params with the scenario's overrides applied."""
    shift = scenario.get("return_shift", 0.0)
    accounts = [
        dataclasses.replace(a, annual_return=a.annual_return + shift)
        for a in household.accounts
    ]
    scenario_household = dataclasses.replace(household, accounts=accounts)
    scenario_params = dataclasses.replace(params, inflation_rate=scenario["inflation_rate"])
    return scenario_household, scenario_params


def run_scenarios(
    household: Household,
    params: SimulationParams,
    scenarios: dict[str, dict] | None = None,
) -> dict[str, SimulationResult]:
    """Run the projection under each scenario.

    Returns {scenario_name: SimulationResult}, in scenario order.
    """
    if scenarios is None:
        scenarios = SCENARIOS
    results = {}
    for name, scenario in scenarios.items():
        scenario_household, scenario_params = apply_scenario(household, params, scenario)
        results[name] = simulate_household(scenario_household, scenario_params)
    return results
