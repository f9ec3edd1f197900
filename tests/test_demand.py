"""
Tests for the most-demanded ranking
"""
from unittest.mock import MagicMock

from conftest import seed_response

from survey_portal.app.errors import BackendError
from survey_portal.db.repository import SurveyRepository
from survey_portal.tools.demand import DemandEntry, RankedDemand, build_demand_report, tally_demand
from survey_portal.workflows.aggregator import DemandAggregator
from survey_portal.workflows.browser import ResponseBrowser
from survey_portal.workflows.submission import SurveySubmitter


def test_tally_orders_by_count_with_stable_ties():
    rows = [
        ("Rice", "product"),
        ("Soap", "product"),
        ("Oil", "product"),
        ("Soap", "product"),
        ("Oil", "product"),
    ]

    assert tally_demand(rows) == [
        DemandEntry("Soap", "product", 2),
        DemandEntry("Oil", "product", 2),
        DemandEntry("Rice", "product", 1),
    ]


def test_grouping_is_case_sensitive():
    report = build_demand_report([("Soap", "product"), ("soap", "product"), ("Soap", "product")])

    assert report.products == [RankedDemand(1, "Soap", 2), RankedDemand(2, "soap", 1)]


def test_same_name_in_both_categories_counted_separately():
    report = build_demand_report([("Repair", "product"), ("Repair", "service"), ("Repair", "service")])

    assert report.products == [RankedDemand(1, "Repair", 1)]
    assert report.services == [RankedDemand(1, "Repair", 2)]


def test_ranks_restart_per_category():
    report = build_demand_report([
        ("Plumbing", "service"),
        ("Rice", "product"),
        ("Plumbing", "service"),
        ("Tuition", "service"),
    ])

    assert [(d.rank, d.item_name) for d in report.services] == [(1, "Plumbing"), (2, "Tuition")]
    assert [(d.rank, d.item_name) for d in report.products] == [(1, "Rice")]


def test_empty_input():
    report = build_demand_report([])

    assert report.products == []
    assert report.services == []
    assert report.to_dataframe("product").empty


def test_to_dataframe():
    report = build_demand_report([("Soap", "product"), ("Soap", "product"), ("Rice", "product")])

    df = report.to_dataframe("product")

    assert list(df.columns) == ["rank", "item", "count"]
    assert df.to_dict("records") == [
        {"rank": 1, "item": "Soap", "count": 2},
        {"rank": 2, "item": "Rice", "count": 1},
    ]


class TestDemandAggregator:
    def test_load_from_store(self, backend, repo):
        seed_response(backend, "Anu", "2026-01-01T08:00:00Z", items=["Soap", "Rice"])
        seed_response(backend, "Biju", "2026-01-02T08:00:00Z", items=["Rice"])
        seed_response(backend, "Chitra", "2026-01-03T08:00:00Z", items=["Plumbing"], role="agent")

        aggregator = DemandAggregator(repo)

        assert aggregator.load() is None
        assert aggregator.report.products == [RankedDemand(1, "Rice", 2), RankedDemand(2, "Soap", 1)]
        assert aggregator.report.services == [RankedDemand(1, "Plumbing", 1)]

    def test_submitted_survey_shows_up_in_ranking(self, repo, valid_form):
        assert SurveySubmitter(repo).submit(valid_form).ok

        aggregator = DemandAggregator(repo)
        aggregator.load()

        assert aggregator.report.products == [RankedDemand(1, "Soap", 1), RankedDemand(2, "Rice", 1)]
        assert aggregator.report.services == []

    def test_case_variants_rank_apart_but_count_once_as_unique(self, backend, repo):
        seed_response(backend, "Anu", "2026-01-01T08:00:00Z", items=["Soap"])
        seed_response(backend, "Biju", "2026-01-02T08:00:00Z", items=["soap"])

        aggregator = DemandAggregator(repo)
        aggregator.load()
        browser = ResponseBrowser(repo)
        browser.load()

        assert [d.item_name for d in aggregator.report.products] == ["Soap", "soap"]
        assert browser.snapshot.summary.unique_items == 1

    def test_reload_gives_same_report(self, backend, repo):
        seed_response(backend, "Anu", "2026-01-01T08:00:00Z", items=["Soap", "Rice"])
        aggregator = DemandAggregator(repo)
        aggregator.load()
        first = aggregator.report

        aggregator.load()

        assert aggregator.report == first

    def test_failure_keeps_previous_report(self):
        repo = MagicMock(spec=SurveyRepository)
        repo.list_item_demand_rows.side_effect = [[("Soap", "product")], BackendError("down")]
        aggregator = DemandAggregator(repo)
        aggregator.load()

        notice = aggregator.load()

        assert notice.kind == "error"
        assert notice.message == "Failed to fetch data"
        assert aggregator.report.products == [RankedDemand(1, "Soap", 1)]
