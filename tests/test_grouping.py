"""Tests for row grouping."""

from tablekit.grouping import build_groups
from tablekit.models import ColumnDef, GroupDef


ROWS = [
    {"id": 1, "team": "red", "level": 1, "score": 10},
    {"id": 2, "team": "blue", "level": 1, "score": 7},
    {"id": 3, "team": "red", "level": 2, "score": 5},
    {"id": 4, "team": "red", "level": 1, "score": 3},
    {"id": 5, "team": None, "level": 1, "score": 1},
]


def row_id(row):
    return row["id"]


class TestBuildGroups:
    """Tests for build_groups."""

    def test_no_group_by(self):
        """Without grouping columns there are no groups."""
        assert build_groups(ROWS, [], [], row_id) == []

    def test_first_appearance_order(self):
        """Groups follow the first row of each key."""
        groups = build_groups(ROWS, [], ["team"], row_id)
        assert [g.values["team"] for g in groups] == ["red", "blue", None]
        assert groups[0].row_ids == [1, 3, 4]
        assert groups[0].size == 3

    def test_multiple_columns(self):
        """Keys combine every grouping column."""
        groups = build_groups(ROWS, [], ["team", "level"], row_id)
        assert [g.values for g in groups][:3] == [
            {"team": "red", "level": 1},
            {"team": "blue", "level": 1},
            {"team": "red", "level": 2},
        ]
        assert groups[0].row_ids == [1, 4]

    def test_aggregates(self):
        """Aggregation functions run over member rows."""
        definitions = [
            GroupDef(column_id="score", aggregation_fn=lambda rows: sum(r["score"] for r in rows)),
            GroupDef(column_id="team"),
        ]
        groups = build_groups(ROWS, [], ["team"], row_id, definitions)
        assert groups[0].aggregates == {"score": 18}
        assert groups[1].aggregates == {"score": 7}

    def test_accessor_used_for_key(self):
        """Grouping values are read through the column accessor."""
        columns = [ColumnDef(id="band", accessor_fn=lambda row: "high" if row["score"] > 5 else "low")]
        groups = build_groups(ROWS, columns, ["band"], row_id)
        assert [(g.values["band"], g.row_ids) for g in groups] == [
            ("high", [1, 2]),
            ("low", [3, 4, 5]),
        ]

    def test_unhashable_values(self):
        """List values group by their representation."""
        rows = [{"id": 1, "tags": ["a"]}, {"id": 2, "tags": ["a"]}, {"id": 3, "tags": ["b"]}]
        groups = build_groups(rows, [], ["tags"], row_id)
        assert [g.row_ids for g in groups] == [[1, 2], [3]]
