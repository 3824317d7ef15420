import pytest

from services.chunking import build_chunk_rows, compute_chunk_ranges, normalize_pages


def as_tuples(ranges):
    return [(r.start_chunk_index, r.end_chunk_index) for r in ranges]


def test_ten_chunks_two_lessons():
    assert as_tuples(compute_chunk_ranges(10, 2)) == [(0, 4), (5, 9)]


def test_uneven_split_clamps_last_range():
    assert as_tuples(compute_chunk_ranges(10, 3)) == [(0, 3), (4, 7), (8, 9)]


def test_more_lessons_than_chunks():
    assert as_tuples(compute_chunk_ranges(2, 5)) == [(0, 0), (1, 1)]


def test_trailing_lessons_without_chunks_are_dropped():
    # two chunks per lesson, the fourth lesson would start past the last chunk
    assert as_tuples(compute_chunk_ranges(6, 4)) == [(0, 1), (2, 3), (4, 5)]


@pytest.mark.parametrize("total,count", [(0, 3), (5, 0), (0, 0)])
def test_nothing_to_split(total, count):
    assert compute_chunk_ranges(total, count) == []


@pytest.mark.parametrize("total", range(1, 25))
@pytest.mark.parametrize("count", range(1, 10))
def test_ranges_cover_every_chunk_exactly_once(total, count):
    ranges = compute_chunk_ranges(total, count)

    assert 1 <= len(ranges) <= min(total, count)
    covered = []
    for r in ranges:
        assert 0 <= r.start_chunk_index <= r.end_chunk_index < total
        covered.extend(range(r.start_chunk_index, r.end_chunk_index + 1))
    assert covered == list(range(total))


def test_normalize_pages_drops_empty_and_serializes_objects():
    pages = ["  Intro  ", "", None, "   ", {"heading": "Cells"}, "End"]
    assert normalize_pages(pages) == ["Intro", '{"heading": "Cells"}', "End"]


def test_build_chunk_rows_indexes_from_zero():
    rows = build_chunk_rows("doc-1", ["a", "b", "c"])
    assert [row["chunk_index"] for row in rows] == [0, 1, 2]
    assert all(row["document_id"] == "doc-1" for row in rows)
    assert rows[1]["content"] == "b"
