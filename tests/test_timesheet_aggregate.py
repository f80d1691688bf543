from crew_timesheet.backend.aggregate import (
    date_range_label,
    group_by_date,
    pick_primary_job_site,
    row_sort_key,
    sort_rows,
    summarize_by_worker,
    total_hours,
)
from crew_timesheet.backend.forms import TimesheetRow


def _row(date, worker, start="08:00 AM", end="12:00 PM", hours=4.0, site="Expo Hall"):
    return TimesheetRow(date=date, job_site=site, worker=worker, start=start, end=end, hours=hours)


def test_time_tie_is_broken_by_worker_name():
    rows = [_row("01/02/2024", "Bea"), _row("01/02/2024", "Al")]
    groups = group_by_date(rows)
    assert len(groups) == 1
    assert groups[0].date == "01/02/2024"
    assert [r.worker for r in groups[0].rows] == ["Al", "Bea"]


def test_group_by_date_orders_groups_and_rows():
    rows = [
        _row("", "Nia"),
        _row("01/03/2024", "Al", start="01:00 PM"),
        _row("01/03/2024", "bea", start="07:00 AM"),
        _row("12/30/2023", "Cy"),
        _row("garbled", "Zed"),
    ]
    groups = group_by_date(rows)
    assert [g.date for g in groups] == ["12/30/2023", "01/03/2024", "(no date)", "garbled"]
    assert [r.worker for r in groups[1].rows] == ["bea", "Al"]

    flat = [r for g in groups for r in g.rows]
    keys = [row_sort_key(r) for r in flat]
    assert keys == sorted(keys)


def test_sort_rows_global_order():
    rows = [_row("01/02/2024", "bea"), _row("01/01/2024", "Zed"), _row("01/02/2024", "Al")]
    assert [r.worker for r in sort_rows(rows)] == ["Zed", "Al", "bea"]


def test_summarize_by_worker_totals_and_dates():
    rows = [
        _row("01/03/2024", "Sam", hours=4.0),
        _row("01/02/2024", "Sam", hours=8.0),
        _row("01/02/2024", "al", hours=2.5),
        _row("", "Sam", hours=1.0),
        _row("01/02/2024", "", hours=3.0),
        _row("01/02/2024", "Sam", hours=None),
    ]
    summaries = summarize_by_worker(rows)
    assert [s.worker for s in summaries] == ["(no name)", "al", "Sam"]
    sam = summaries[2]
    assert sam.total == 13.0
    assert sam.dates() == [("01/02/2024", 8.0), ("01/03/2024", 4.0), ("(no date)", 1.0)]
    for s in summaries:
        expected = sum(r.hours or 0 for r in rows if (r.worker or "(no name)") == s.worker)
        assert s.total == expected


def test_pick_primary_job_site():
    rows = [
        _row("", "A", site="Hall B"),
        _row("", "B", site="Hall C"),
        _row("", "C", site="Hall C"),
        _row("", "D", site=""),
    ]
    assert pick_primary_job_site(rows) == "Hall C"
    # ties go to the site seen first
    assert pick_primary_job_site(rows[:2]) == "Hall B"
    assert pick_primary_job_site([_row("", "A", site=" ")]) == "Job Site"
    assert pick_primary_job_site([]) == "Job Site"


def test_total_hours_and_date_range():
    rows = [_row("01/03/2024", "A"), _row("01/01/2024", "B", hours=None), _row("", "C")]
    assert total_hours(rows) == 8.0
    assert date_range_label(rows) == "01/01/2024 - 01/03/2024"
    assert date_range_label(rows[:1]) == "01/03/2024"
    assert date_range_label([_row("", "C")]) == "(no date)"
