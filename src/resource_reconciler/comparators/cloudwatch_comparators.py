"""
CloudWatch Comparators Module.

This module contains functions for comparing desired CloudWatch metric alarm
fields with the last observed ones.
"""

from typing import Any, Callable, Dict, List, Mapping, Optional

from .base import (
    ComparisonResult,
    compare_scalar,
    compare_string_maps,
    compare_string_sets,
    merge_results,
)

# Every user-settable alarm field. Changing any of them triggers a full put.
ALARM_DECLARED_FIELDS = (
    "actions_enabled",
    "alarm_actions",
    "alarm_description",
    "alarm_name",
    "comparison_operator",
    "datapoints_to_alarm",
    "dimensions",
    "evaluation_periods",
    "evaluate_low_sample_count_percentiles",
    "extended_statistic",
    "insufficient_data_actions",
    "metric_name",
    "metric_query",
    "namespace",
    "ok_actions",
    "period",
    "statistic",
    "threshold",
    "treat_missing_data",
    "unit",
)


def _first_metric(block: Mapping[str, Any]) -> Optional[Mapping[str, Any]]:
    metric = block.get("metric")
    if isinstance(metric, list):
        return metric[0] if metric else None
    return metric or None


def _compare_metric_stat(
    attribute: str, old_metric: Optional[Mapping[str, Any]], new_metric: Optional[Mapping[str, Any]]
) -> ComparisonResult:
    if old_metric is None and new_metric is None:
        return ComparisonResult.from_differences([])
    old_metric = old_metric or {}
    new_metric = new_metric or {}
    results = [
        compare_scalar(f"{attribute}.{key}", old_metric.get(key), new_metric.get(key))
        for key in ("metric_name", "namespace", "stat", "unit")
    ]
    results.append(
        compare_scalar(
            f"{attribute}.period",
            int(old_metric.get("period") or 0),
            int(new_metric.get("period") or 0),
        )
    )
    results.append(
        compare_string_maps(
            f"{attribute}.dimensions", old_metric.get("dimensions"), new_metric.get("dimensions")
        )
    )
    return merge_results(*results)


def compare_metric_queries(
    attribute: str,
    old_value: Optional[List[Mapping[str, Any]]],
    new_value: Optional[List[Mapping[str, Any]]],
) -> ComparisonResult:
    """
    Compare two metric_query lists query by query.

    Queries are matched by position. A different number of queries is
    reported as a single difference on the list itself.
    """
    old_queries = list(old_value or [])
    new_queries = list(new_value or [])
    if len(old_queries) != len(new_queries):
        return ComparisonResult.from_differences(
            [
                {
                    "attribute": attribute,
                    "old_value": len(old_queries),
                    "new_value": len(new_queries),
                }
            ]
        )

    results = []
    for index, (old_query, new_query) in enumerate(zip(old_queries, new_queries)):
        prefix = f"{attribute}.{index}"
        for key in ("id", "expression", "label"):
            results.append(compare_scalar(f"{prefix}.{key}", old_query.get(key), new_query.get(key)))
        results.append(
            compare_scalar(
                f"{prefix}.return_data",
                bool(old_query.get("return_data", False)),
                bool(new_query.get("return_data", False)),
            )
        )
        results.append(
            _compare_metric_stat(f"{prefix}.metric", _first_metric(old_query), _first_metric(new_query))
        )
    return merge_results(*results)


def _compare_threshold(attribute: str, old_value: Any, new_value: Any) -> ComparisonResult:
    old_float = float(old_value) if old_value is not None else None
    new_float = float(new_value) if new_value is not None else None
    return compare_scalar(attribute, old_float, new_float)


ALARM_FIELD_COMPARATORS: Dict[str, Callable[[str, Any, Any], ComparisonResult]] = {
    "alarm_actions": compare_string_sets,
    "insufficient_data_actions": compare_string_sets,
    "ok_actions": compare_string_sets,
    "dimensions": compare_string_maps,
    "metric_query": compare_metric_queries,
    "threshold": _compare_threshold,
}


def comparator_for(field_name: str) -> Callable[[str, Any, Any], ComparisonResult]:
    return ALARM_FIELD_COMPARATORS.get(field_name, compare_scalar)
