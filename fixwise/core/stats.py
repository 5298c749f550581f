"""看板统计

按时间窗口筛选诊断历史，并统计省份分布与品类/故障问题分布。
"""
from collections import Counter
from datetime import date, datetime, timedelta
from typing import Iterable, List, Sequence, Tuple

from fixwise.core.region import normalize_to_province
from fixwise.models import FaultDiagnosis

GRANULARITIES = ("day", "week", "month", "quarter", "year")

ALL_CATEGORIES = "全部品类"

CATEGORIES = ["洗车器", "吸尘器", "车载空气净化器", "车载小冰箱", "车载便携充气泵", "户外露营产品"]


def time_window(selected: date, granularity: str) -> Tuple[datetime, datetime]:
    """
    计算时间窗口 [start, end)

    Args:
        selected: 选中的日期
        granularity: day/week/month/quarter/year

    Returns:
        (start, end) 本地时间
    """
    if granularity not in GRANULARITIES:
        raise ValueError(f"不支持的时间粒度: {granularity}")

    day = datetime(selected.year, selected.month, selected.day)
    if granularity == "day":
        return day, day + timedelta(days=1)
    if granularity == "week":
        start = day - timedelta(days=day.weekday())
        return start, start + timedelta(days=7)
    if granularity == "month":
        start = day.replace(day=1)
    elif granularity == "quarter":
        start = day.replace(month=(day.month - 1) // 3 * 3 + 1, day=1)
    else:
        start = day.replace(month=1, day=1)

    months = {"month": 1, "quarter": 3, "year": 12}[granularity]
    month_index = start.month - 1 + months
    end = start.replace(year=start.year + month_index // 12, month=month_index % 12 + 1)
    return start, end


def filter_by_window(
    history: Iterable[FaultDiagnosis],
    selected: date,
    granularity: str,
) -> List[FaultDiagnosis]:
    """筛选时间窗口内的诊断记录"""
    start, end = time_window(selected, granularity)
    start_ms = int(start.timestamp() * 1000)
    end_ms = int(end.timestamp() * 1000)
    return [h for h in history if start_ms <= h.timestamp < end_ms]


def _sorted_counts(counter: Counter) -> List[Tuple[str, int]]:
    # 数量降序，数量相同时保持首次出现顺序
    return sorted(counter.items(), key=lambda item: item[1], reverse=True)


def region_stats(history: Sequence[FaultDiagnosis]) -> List[Tuple[str, int]]:
    """省份分布（数量降序）"""
    return _sorted_counts(Counter(normalize_to_province(h.source_region) for h in history))


def issue_stats(
    history: Sequence[FaultDiagnosis],
    category: str = ALL_CATEGORIES,
) -> List[Tuple[str, int]]:
    """
    品类分布或单一品类下的故障问题分布

    Args:
        history: 诊断记录
        category: ALL_CATEGORIES 时按品类统计，否则统计该品类下的故障问题

    Returns:
        [(名称, 数量), ...]，数量降序
    """
    if category == ALL_CATEGORIES:
        return _sorted_counts(Counter(h.category for h in history))
    return _sorted_counts(Counter(
        h.result.fault_issue for h in history if h.category == category
    ))
