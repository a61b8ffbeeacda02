import pytest

from retail_agents.sales_plan import PlanBoard
from retail_agents.sales_plan.hierarchy import CategoryGroup, Hierarchy
from retail_agents.sales_plan.settings import PlanSettings

REGION_NAMES = {"SH": "Shanghai Region", "JS": "Jiangsu Region"}


@pytest.fixture
def board():
    return PlanBoard.initialize(PlanSettings(seed=42))


@pytest.fixture
def small_hierarchy():
    return Hierarchy(
        groups=(CategoryGroup(id="dept", name="Dept", children=("A", "B")),),
        region_names=dict(REGION_NAMES),
    )


@pytest.fixture
def small_board(small_hierarchy):
    # Three days; the third one is "today", so only the first two have actuals.
    settings = PlanSettings(start_date="2025-01-06", end_date="2025-01-08", today="2025-01-08", seed=7)
    return PlanBoard.initialize(settings, hierarchy=small_hierarchy)
