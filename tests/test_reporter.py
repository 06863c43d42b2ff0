"""Failure message layout."""

from __future__ import annotations

from nplusone_control.models import ExecutionRun, GrowthPolicy, RunSet
from nplusone_control.reporter import build_failure_message, expectation_header, table_usage_stats
from nplusone_control.table_stats import LOOSE_TABLE_RE

N_PLUS_ONE = RunSet(
    runs=(
        ExecutionRun(
            scale=2,
            queries=('SELECT * FROM "posts"', 'SELECT * FROM "users" WHERE id = 1', 'SELECT * FROM "users" WHERE id = 2'),
        ),
        ExecutionRun(
            scale=3,
            queries=(
                'SELECT * FROM "posts"',
                'SELECT * FROM "users" WHERE id = 1',
                'SELECT * FROM "users" WHERE id = 2',
                'SELECT * FROM "users" WHERE id = 3',
            ),
        ),
    )
)


def test_counts_per_scale_in_order():
    message = build_failure_message(N_PLUS_ONE, show_table_stats=False)
    assert message == (
        "Expected to make the same number of queries, but got:\n"
        "  3 for N=2\n"
        "  4 for N=3\n"
    )


def test_table_stats_list_only_changed_tables():
    run_set = RunSet(
        runs=(
            ExecutionRun(
                scale=2,
                queries=('SELECT * FROM "users"', 'SELECT * FROM "users"', 'INSERT INTO "orders" VALUES (1)'),
            ),
            ExecutionRun(
                scale=3,
                queries=('SELECT * FROM "users"',) * 4 + ('INSERT INTO "orders" VALUES (1)',),
            ),
        )
    )
    message = build_failure_message(run_set)

    assert "Unmatched query numbers by tables:\n  users (SELECT): 2 != 4\n" in message
    assert "orders (INSERT)" not in message


def test_table_stats_compare_first_and_last_run():
    run_set = RunSet(
        runs=(
            ExecutionRun(scale=1, queries=('SELECT * FROM "users"',)),
            ExecutionRun(scale=2, queries=('SELECT * FROM "users"',) * 5),
            ExecutionRun(scale=3, queries=('SELECT * FROM "users"',) * 3),
        )
    )
    assert table_usage_stats(run_set)[1:] == ["  users (SELECT): 1 != 3\n"]


def test_table_stats_with_loose_pattern():
    run_set = RunSet(
        runs=(
            ExecutionRun(scale=2, queries=("SELECT id FROM users",)),
            ExecutionRun(scale=3, queries=("SELECT id FROM users", "SELECT id FROM users")),
        )
    )
    message = build_failure_message(run_set, table_pattern=LOOSE_TABLE_RE)
    assert "  users (SELECT): 1 != 2\n" in message


def test_verbose_dumps_every_query():
    message = build_failure_message(N_PLUS_ONE, verbose=True, show_table_stats=False)

    assert "Queries for N=2\n" in message
    assert "Queries for N=3\n" in message
    for run in N_PLUS_ONE:
        for query in run.queries:
            assert f"  {query}\n" in message
    assert message.index("Queries for N=2") < message.index("Queries for N=3")


def test_quiet_report_has_no_queries():
    message = build_failure_message(N_PLUS_ONE, verbose=False)
    assert "Queries for N=" not in message
    assert 'WHERE id = 3' not in message


def test_custom_header():
    message = build_failure_message(N_PLUS_ONE, header="Too many queries:\n", show_table_stats=False)
    assert message.startswith("Too many queries:\n  3 for N=2\n")


def test_expectation_headers():
    assert expectation_header() == "Expected to make the same number of queries, but got:\n"
    assert expectation_header(GrowthPolicy.NON_INCREASING, tolerance=1) == (
        "Expected the number of queries not to grow (tolerance 1), but got:\n"
    )
    assert expectation_header(GrowthPolicy.LINEAR, slope=2) == (
        "Expected to make linear number of queries (slope 2), but got:\n"
    )


def test_verbose_prints_call_sites_under_each_query():
    run_set = RunSet(
        runs=(
            ExecutionRun(scale=2, queries=("SELECT 1",), backtraces=(("app/views.py:12:in `index`",),)),
            ExecutionRun(
                scale=3,
                queries=("SELECT 1", "SELECT 2"),
                backtraces=(("app/views.py:12:in `index`",), ("app/views.py:14:in `index`",)),
            ),
        )
    )
    message = build_failure_message(run_set, verbose=True, show_table_stats=False)

    assert "  SELECT 2\n    ↳ app/views.py:14:in `index`\n" in message
    assert message.count("    ↳ ") == 3


def test_quiet_report_has_no_call_sites():
    run_set = RunSet(
        runs=(
            ExecutionRun(scale=2, queries=("SELECT 1",), backtraces=(("app/views.py:12:in `index`",),)),
            ExecutionRun(scale=3, queries=("SELECT 1",), backtraces=(("app/views.py:12:in `index`",),)),
        )
    )
    assert "↳" not in build_failure_message(run_set, verbose=False)
