import math
from datetime import datetime, timedelta, timezone

import pytest

from storefront.admin_dashboard.analytics.metrics import (
    DAY,
    build_daily_sales,
    calculate_growth,
    compute_metrics,
    join_top_sellers,
    parse_time_range,
    rank_top_sellers,
    resolve_window,
    summarize_period,
)
from storefront.admin_dashboard.analytics.schemas import TimeRange

from factories import make_order, make_product, make_user

NOW = datetime(2025, 1, 8, tzinfo=timezone.utc)


def at(day: int, hour: int = 12, month: int = 1, year: int = 2025) -> datetime:
    return datetime(year, month, day, hour, tzinfo=timezone.utc)


# Growth

@pytest.mark.parametrize("current", [1, 0.01, 250, 10_000])
def test_growth_from_zero_is_flat_hundred(current):
    assert calculate_growth(current, 0) == 100


def test_growth_from_zero_to_zero_is_zero():
    assert calculate_growth(0, 0) == 0


@pytest.mark.parametrize(
    "current, previous, expected",
    [
        (10_000, 5_000, 100.0),
        (150, 100, 50.0),
        (50, 100, -50.0),
        (0, 80, -100.0),
        (7, 3, (7 - 3) / 3 * 100),
    ],
)
def test_growth_relative_change(current, previous, expected):
    assert calculate_growth(current, previous) == pytest.approx(expected)


# Window

def test_seven_day_window_example():
    window = resolve_window("7d", NOW)

    assert window.start == datetime(2025, 1, 1, tzinfo=timezone.utc)
    assert window.previous_start == datetime(2024, 12, 25, tzinfo=timezone.utc)


@pytest.mark.parametrize("token", ["7d", "30d", "90d", "1y"])
def test_previous_window_mirrors_current(token):
    now = datetime(2025, 6, 17, 9, 45, tzinfo=timezone.utc)
    window = resolve_window(token, now)

    assert window.now - window.previous_start == 2 * (window.now - window.start)
    assert window.previous_start < window.start < window.now


@pytest.mark.parametrize("token, days", [("7d", 7), ("30d", 30), ("90d", 90)])
def test_day_ranges(token, days):
    assert resolve_window(token, NOW).start == NOW - timedelta(days=days)


def test_year_range_is_calendar_year():
    now = datetime(2025, 3, 15, 12, tzinfo=timezone.utc)
    assert resolve_window("1y", now).start == datetime(2024, 3, 15, 12, tzinfo=timezone.utc)


def test_year_range_from_leap_day():
    now = datetime(2024, 2, 29, 8, tzinfo=timezone.utc)
    assert resolve_window("1y", now).start == datetime(2023, 2, 28, 8, tzinfo=timezone.utc)


@pytest.mark.parametrize("token", [None, "", "2w", "30D", "all"])
def test_unknown_range_falls_back_to_thirty_days(token):
    assert parse_time_range(token) is TimeRange.LAST_30_DAYS
    assert resolve_window(token, NOW).start == NOW - timedelta(days=30)


def test_naive_now_is_treated_as_utc():
    window = resolve_window("7d", datetime(2025, 1, 8))
    assert window.now == NOW
    assert window.now.tzinfo is not None


# Scalar metrics

def test_empty_periods_produce_zeros():
    metrics = compute_metrics([], [], [], [])

    assert metrics["total_revenue"] == 0
    assert metrics["revenue_trend"] == 0
    assert metrics["average_order_value"] == 0
    assert metrics["conversion_rate"] == 0
    assert metrics["aov_trend"] == 0
    assert metrics["conversion_trend"] == 0


def test_conversion_rate_is_zero_without_signups():
    totals = summarize_period([make_order(120, at(2))], [])
    assert totals.conversion_rate == 0
    assert totals.average_order_value == 120


def test_metrics_against_previous_period():
    current_orders = [make_order(6_000, at(2)), make_order(4_000, at(3))]
    current_users = [make_user(at(d)) for d in (2, 3, 4, 5)]
    previous_orders = [make_order(5_000, at(27, month=12, year=2024))]
    previous_users = [make_user(at(26, month=12, year=2024)), make_user(at(28, month=12, year=2024))]

    metrics = compute_metrics(current_orders, current_users, previous_orders, previous_users)

    assert metrics["total_revenue"] == 10_000
    assert metrics["revenue_trend"] == pytest.approx(100.0)
    assert metrics["total_orders"] == 2
    assert metrics["orders_trend"] == pytest.approx(100.0)
    assert metrics["total_users"] == 4
    assert metrics["users_trend"] == pytest.approx(100.0)
    assert metrics["conversion_rate"] == pytest.approx(50.0)
    assert metrics["conversion_trend"] == pytest.approx(0.0)
    assert metrics["average_order_value"] == pytest.approx(5_000)
    assert metrics["aov_trend"] == pytest.approx(0.0)


def test_trends_of_ratios_use_same_growth_rule():
    # 1 order / 4 users now vs. 1 order / 1 user before
    metrics = compute_metrics(
        [make_order(30, at(2))],
        [make_user(at(d)) for d in (2, 3, 4, 5)],
        [make_order(60, at(28, month=12, year=2024))],
        [make_user(at(28, month=12, year=2024))],
    )

    assert metrics["conversion_trend"] == pytest.approx(calculate_growth(25.0, 100.0))
    assert metrics["aov_trend"] == pytest.approx(-50.0)


# Top sellers

def test_rank_sums_quantities_per_product():
    shirt, dress, scarf = make_product("Shirt"), make_product("Dress"), make_product("Scarf")
    orders = [
        make_order(100, at(2), items=[(shirt, 2), (dress, 1)]),
        make_order(100, at(3), items=[(shirt, 1), (scarf, 7)]),
        make_order(100, at(4), items=[(dress, 1), (dress, 2)]),
    ]

    ranking = rank_top_sellers(orders)

    assert ranking[0] == (scarf.uid, 7)
    assert dict(ranking) == {scarf.uid: 7, dress.uid: 4, shirt.uid: 3}


def test_rank_breaks_ties_by_product_id():
    first, second = make_product("A"), make_product("B")
    orders = [make_order(50, at(2), items=[(first, 3), (second, 3)])]

    ranking = rank_top_sellers(orders)

    assert [uid for uid, _ in ranking] == sorted([first.uid, second.uid], key=str)


def test_rank_keeps_ten_best():
    products = [make_product(f"P{n}") for n in range(12)]
    orders = [make_order(10, at(2), items=[(product, n + 1)]) for n, product in enumerate(products)]

    ranking = rank_top_sellers(orders)

    assert len(ranking) == 10
    assert ranking[0] == (products[11].uid, 12)
    assert [count for _, count in ranking] == sorted((count for _, count in ranking), reverse=True)


def test_join_resorts_and_drops_missing_products():
    coat = make_product("Coat", price=180.0, stock=3)
    boots = make_product("Boots", price=120.0, stock=0)
    gone = make_product("Discontinued")

    ranking = [(coat.uid, 9), (gone.uid, 6), (boots.uid, 4)]
    rows = join_top_sellers(ranking, [boots, coat])

    assert [row.product.name for row in rows] == ["Coat", "Boots"]
    assert [row.sales_count for row in rows] == [9, 4]
    # inventory is reported as-is, not replaced by units sold
    assert rows[0].product.stock == 3
    assert rows[1].product.stock == 0
    assert rows[0].product.price == 180.0


def test_join_sorts_descending_even_when_ranking_is_not():
    low, high = make_product("Low"), make_product("High")
    rows = join_top_sellers([(low.uid, 1), (high.uid, 8)], [low, high])

    assert [row.sales_count for row in rows] == [8, 1]


def test_top_sellers_serialize_with_sales_count_alias():
    hat = make_product("Hat", stock=11)
    row = join_top_sellers([(hat.uid, 2)], [hat])[0]

    payload = row.model_dump(by_alias=True)
    assert payload["salesCount"] == 2
    assert payload["product"]["stock"] == 11


# Daily series

def test_daily_series_is_dense_and_ordered():
    window = resolve_window("7d", NOW)
    orders = [make_order(100, at(2)), make_order(50, at(2, hour=23)), make_order(30, at(6))]
    users = [make_user(at(2)), make_user(at(7, hour=1))]

    series = build_daily_sales(window, orders, users)

    assert [day.date for day in series] == [f"2025-01-0{d}" for d in range(1, 8)]
    by_date = {day.date: day for day in series}
    assert by_date["2025-01-02"].revenue == 150
    assert by_date["2025-01-02"].orders == 2
    assert by_date["2025-01-02"].users == 1
    assert by_date["2025-01-06"].revenue == 30
    assert by_date["2025-01-07"].users == 1
    assert by_date["2025-01-04"].revenue == 0
    assert by_date["2025-01-04"].orders == 0


@pytest.mark.parametrize("token", ["7d", "30d", "90d", "1y"])
def test_daily_series_length_matches_window(token):
    now = datetime(2025, 1, 8, 15, 30, tzinfo=timezone.utc)
    window = resolve_window(token, now)

    series = build_daily_sales(window, [], [])

    assert len(series) == math.ceil((window.now - window.start) / DAY)
    dates = [day.date for day in series]
    assert dates == sorted(set(dates))


def test_year_series_spans_leap_year():
    window = resolve_window("1y", NOW)
    assert len(build_daily_sales(window, [], [])) == 366


def test_daily_revenue_adds_up_to_total_when_not_midnight_aligned():
    now = datetime(2025, 1, 8, 15, 30, tzinfo=timezone.utc)
    window = resolve_window("7d", now)
    orders = [
        make_order(10.5, window.start),
        make_order(20.25, at(4, hour=3)),
        make_order(99.99, datetime(2025, 1, 8, 10, tzinfo=timezone.utc)),
    ]

    series = build_daily_sales(window, orders, [])

    assert sum(day.revenue for day in series) == pytest.approx(summarize_period(orders, []).revenue)
    assert series[-1].orders == 1
    assert series[0].orders == 1


def test_daily_series_ignores_rows_outside_window():
    window = resolve_window("7d", NOW)
    orders = [
        make_order(500, window.start - timedelta(seconds=1)),
        make_order(700, NOW),
        make_order(40, at(3)),
    ]

    series = build_daily_sales(window, orders, [])

    assert sum(day.orders for day in series) == 1
    assert sum(day.revenue for day in series) == 40


def test_daily_series_accepts_naive_timestamps():
    window = resolve_window("7d", NOW)
    series = build_daily_sales(window, [make_order(25, datetime(2025, 1, 5, 9))], [])

    assert {day.date: day.revenue for day in series}["2025-01-05"] == 25
