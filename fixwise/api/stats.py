"""看板统计 API 接口"""
from datetime import date
from typing import Literal, Optional

from fastapi import APIRouter, Depends

from fixwise.api.deps import get_app_state
from fixwise.core.app_state import AppState
from fixwise.core.stats import ALL_CATEGORIES, filter_by_window, issue_stats, region_stats

router = APIRouter()


@router.get("/stats")
async def get_stats(
    selected_date: Optional[date] = None,
    granularity: Literal["day", "week", "month", "quarter", "year"] = "month",
    category: str = ALL_CATEGORIES,
    state: AppState = Depends(get_app_state),
):
    """
    看板统计

    Returns:
        - total: 时间窗口内的案例总数
        - regions: 省份分布 [{name, value}]
        - issues: 品类分布，或指定品类下的故障问题分布 [{name, value}]
    """
    items = filter_by_window(state.history, selected_date or date.today(), granularity)
    return {
        "total": len(items),
        "regions": [{"name": n, "value": v} for n, v in region_stats(items)],
        "issues": [{"name": n, "value": v} for n, v in issue_stats(items, category)],
    }
