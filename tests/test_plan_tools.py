import pytest

from retail_agents.sales_plan import plan_tools


@pytest.fixture(autouse=True)
def seeded_board(board):
    plan_tools.use_board(board)
    yield board
    plan_tools.use_board(None)


def test_fetch_plan_summary_defaults_to_network_root():
    result = plan_tools.fetch_plan_summary()
    assert result["row_id"] == "Total_total"
    assert result["filters"]["start_date"] == "2025-01-01"
    assert result["filters"]["end_date"] == "2025-01-22"
    summary = result["summary"]
    assert summary["has_past"] and summary["has_future"]
    assert summary["achievement_rate_pct"] > 0


def test_fetch_plan_summary_for_category_and_group():
    assert plan_tools.fetch_plan_summary(region="sh", category="Bakery")["row_id"] == "SH_Bakery"
    assert plan_tools.fetch_plan_summary(region="JS", group="fresh_dept")["row_id"] == "JS_fresh_dept"


def test_future_window_has_no_past_numbers():
    result = plan_tools.fetch_plan_summary(start_date="2025-02-01", end_date="2025-02-07")
    assert result["summary"]["has_past"] is False
    assert result["summary"]["avg_actual"] is None
    assert result["summary"]["achievement_rate_pct"] == 0


@pytest.mark.parametrize(
    "kwargs, hint",
    [
        ({"region": "Mars"}, "available_regions"),
        ({"category": "Nope"}, "available_categories"),
        ({"group": "nope"}, "available_groups"),
    ],
)
def test_fetch_plan_summary_errors_are_payloads(kwargs, hint):
    result = plan_tools.fetch_plan_summary(**kwargs)
    assert "error" in result
    assert hint in result


def test_reversed_window_is_an_error_payload():
    result = plan_tools.fetch_plan_summary(start_date="2025-01-10", end_date="2025-01-01")
    assert "error" in result


def test_investigate_plan_performance():
    result = plan_tools.investigate_plan_performance(region="SH")
    assert result["scope"]["region"] == "SH"
    assert result["baseline"]["row_id"] == "SH_total"
    assert [g["row_id"] for g in result["groups"]] == ["SH_fresh_dept", "SH_standard_dept"]
    assert result["leaf_top"]["summary"]["achievement_rate_pct"] >= result["leaf_bottom"]["summary"]["achievement_rate_pct"]
    assert result["anomaly_candidates"]
    assert len(result["recommended_next_questions"]) == 3


def test_update_plan_value_reports_changed_rows(seeded_board):
    result = plan_tools.update_plan_value("SH_Bakery", "2025-01-10", 999)
    changed = {c["row_id"] for c in result["changed"]}
    assert {"SH_Bakery", "SH_fresh_dept", "SH_total", "Total_Bakery", "Total_total"} <= changed
    idx = result["date_index"]
    assert seeded_board.get_row("SH_Bakery").plan_values[idx] == 999


def test_update_plan_value_errors():
    assert "error" in plan_tools.update_plan_value("SH_Nope", "2025-01-10", 1)
    assert "error" in plan_tools.update_plan_value("SH_Bakery", "2030-01-01", 1)
    assert "error" in plan_tools.update_plan_value("SH_Bakery", "2025-01-10", "lots")


def test_update_store_count():
    result = plan_tools.update_store_count("js", "2025-01-02", 30)
    assert result["store_counts"]["JS"] == 30
    assert all(r["row_id"].startswith("Total_") for r in result["network_rows"])
    assert all(r["actual"] is not None for r in result["network_rows"])


def test_update_store_count_errors():
    assert "error" in plan_tools.update_store_count("Total", "2025-01-02", 30)
    assert "error" in plan_tools.update_store_count("SH", "2025-01-02", -3)


def test_malformed_window_is_an_error_payload():
    result = plan_tools.fetch_plan_summary(start_date="Jan 5", end_date="2025-01-10")
    assert "error" in result
