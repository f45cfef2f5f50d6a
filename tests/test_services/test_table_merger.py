"""Tests for cross-table merging."""

from social_report.services.grid_scanner import scan_workbook
from social_report.services.metric_tagger import tag_tables
from social_report.services.table_merger import (
    build_merged_dataset,
    empty_meta,
    first_number,
    first_string,
    merge_tables,
)
from social_report.workbook import MetricType, Platform, RawWorkbook
from tests.fixtures import make_normalized


class TestMergeTables:
    """Tests for merge_tables."""

    def test_column_union_in_first_seen_order(self) -> None:
        first = make_normalized(["Date", "Reach"], [{"Date": "d1", "Reach": 1}])
        second = make_normalized(
            ["Date", "Likes", "Reach"],
            [{"Date": "d2", "Likes": 4, "Reach": 2}],
            sheet_name="Instagram",
        )

        merged = merge_tables([first, second], MetricType.REACH)

        assert merged.columns == ["Date", "Reach", "Likes"]
        assert merged.rows == [
            {"Date": "d1", "Reach": 1, "Likes": None},
            {"Date": "d2", "Reach": 2, "Likes": 4},
        ]

    def test_rows_keep_table_order(self) -> None:
        tables = [
            make_normalized(["N"], [{"N": 1}, {"N": 2}]),
            make_normalized(["N"], [{"N": 3}]),
        ]

        merged = merge_tables(tables, MetricType.REACH)

        assert [row["N"] for row in merged.rows] == [1, 2, 3]

    def test_only_matching_metric_type(self) -> None:
        reach = make_normalized(["Reach"], [{"Reach": 1}])
        views = make_normalized(
            ["Views"], [{"Views": 9}], metric_type=MetricType.VIEWS
        )

        merged = merge_tables([reach, views], MetricType.VIEWS)

        assert merged.columns == ["Views"]
        assert merged.rows == [{"Views": 9}]

    def test_meta_of_first_contributor(self) -> None:
        first = make_normalized(["A"], [{"A": 1}], sheet_name="Facebook")
        second = make_normalized(["A"], [{"A": 2}], sheet_name="Instagram")

        merged = merge_tables([first, second], MetricType.REACH)

        assert merged.meta is first.meta

    def test_no_contributors(self) -> None:
        merged = merge_tables([], MetricType.ENGAGEMENT)

        assert merged.columns == []
        assert merged.rows == []
        assert merged.meta == empty_meta(MetricType.ENGAGEMENT)
        assert merged.meta.sheet_name == "virtual"
        assert merged.meta.platform == Platform.UNKNOWN
        assert merged.meta.table_type == "engagement_merged"

    def test_row_count_is_sum_of_inputs(self) -> None:
        tables = [
            make_normalized(["A"], [{"A": i} for i in range(3)]),
            make_normalized(["B"], [{"B": i} for i in range(4)]),
        ]

        merged = merge_tables(tables, MetricType.REACH)

        assert len(merged.rows) == 7
        assert all(list(row) == merged.columns for row in merged.rows)


class TestBuildMergedDataset:
    def test_sample_workbook(self, sample_raw_workbook: RawWorkbook) -> None:
        dataset = build_merged_dataset(tag_tables(scan_workbook(sample_raw_workbook)))

        assert len(dataset.overview.rows) == 3
        # Facebook (2) + Instagram (1) + facebook_post (1)
        assert len(dataset.reach.rows) == 4
        # mains, post and the two Calculations rows
        assert len(dataset.views.rows) == 6
        assert len(dataset.impressions.rows) == 5
        assert len(dataset.engagement.rows) == 4
        assert "Total Impressions (Sum)" in dataset.impressions.columns

    def test_tables_in_tab_order(self) -> None:
        dataset = build_merged_dataset([])

        assert [metric for metric, _ in dataset.tables()] == [
            MetricType.OVERVIEW,
            MetricType.REACH,
            MetricType.VIEWS,
            MetricType.IMPRESSIONS,
            MetricType.ENGAGEMENT,
        ]
        assert all(table.rows == [] for _, table in dataset.tables())

    def test_to_dict_serializes_dates(self, sample_raw_workbook: RawWorkbook) -> None:
        dataset = build_merged_dataset(tag_tables(scan_workbook(sample_raw_workbook)))

        data = dataset.to_dict()

        assert set(data) == {
            "overview",
            "reach",
            "views",
            "impressions",
            "engagement",
        }
        assert data["overview"]["rows"][0]["Date"] == "2024-01-01T00:00:00"
        assert data["overview"]["meta"]["metric_type"] == "overview"


class TestAliasLookup:
    """Tests for first-match alias resolution."""

    def test_first_number_wins(self) -> None:
        row = {"Fans": 10, "Followers": 20}

        assert first_number(row, ["Followers", "Fans"]) == 20
        assert first_number(row, ["Fans", "Followers"]) == 10

    def test_first_number_skips_non_numbers(self) -> None:
        row = {"Followers": "n/a", "Fans": 10, "Flag": True}

        assert first_number(row, ["Followers", "Fans"]) == 10
        assert first_number(row, ["Flag"]) is None

    def test_first_number_missing(self) -> None:
        assert first_number({}, ["Reach"]) is None

    def test_zero_is_a_number(self) -> None:
        assert first_number({"Reach": 0, "Alt": 5}, ["Reach", "Alt"]) == 0

    def test_first_string(self) -> None:
        row = {"Perma Link": "  ", "Text": "hello", "Other": 3}

        assert first_string(row, ["Perma Link", "Text"]) == "hello"
        assert first_string(row, ["Other"]) is None
