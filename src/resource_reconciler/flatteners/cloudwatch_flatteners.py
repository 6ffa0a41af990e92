"""
CloudWatch Flatteners Module.

This module converts CloudWatch API responses into the alarm's field
vocabulary. Absent remote collections become empty containers, never None;
absent numbers stay None and absent strings become "".
"""

from typing import Any, Dict, List, Optional

from ..types import ApiPayload, RemoteRecord


def _float_or_none(value: Any) -> Optional[float]:
    return float(value) if value is not None else None


def flatten_dimensions(dimensions: Optional[List[ApiPayload]]) -> Dict[str, str]:
    """Convert an API Name/Value dimension list into a map."""
    return {dimension["Name"]: dimension["Value"] for dimension in dimensions or []}


def flatten_string_set(values: Optional[List[str]]) -> List[str]:
    """Set-typed attributes are returned sorted so that snapshots are stable."""
    return sorted(set(values or []))


def flatten_metric_queries(metrics: Optional[List[ApiPayload]]) -> List[Dict[str, Any]]:
    """
    Convert MetricDataQuery entries into metric_query blocks.

    Query order is preserved as returned by the API. Each block carries either
    an expression or a single-element metric list, mirroring what was sent.
    """
    queries = []
    for query in metrics or []:
        block: Dict[str, Any] = {"id": query["Id"]}
        if query.get("Expression") is not None:
            block["expression"] = query["Expression"]
        if query.get("Label") is not None:
            block["label"] = query["Label"]
        if query.get("ReturnData") is not None:
            block["return_data"] = query["ReturnData"]
        metric_stat = query.get("MetricStat")
        if metric_stat is not None:
            metric = metric_stat.get("Metric", {})
            flat_metric: Dict[str, Any] = {
                "dimensions": flatten_dimensions(metric.get("Dimensions")),
            }
            if metric.get("MetricName") is not None:
                flat_metric["metric_name"] = metric["MetricName"]
            if metric.get("Namespace") is not None:
                flat_metric["namespace"] = metric["Namespace"]
            if metric_stat.get("Period") is not None:
                flat_metric["period"] = int(metric_stat["Period"])
            if metric_stat.get("Stat") is not None:
                flat_metric["stat"] = metric_stat["Stat"]
            if metric_stat.get("Unit") is not None:
                flat_metric["unit"] = metric_stat["Unit"]
            block["metric"] = [flat_metric]
        queries.append(block)
    return queries


def flatten_metric_alarm(alarm: ApiPayload) -> RemoteRecord:
    """
    Map a MetricAlarm from describe_alarms onto the alarm's fields.

    Args:
        alarm: One entry of the MetricAlarms list

    Returns:
        Flattened record including the computed arn
    """
    return {
        "actions_enabled": alarm.get("ActionsEnabled", False),
        "alarm_actions": flatten_string_set(alarm.get("AlarmActions")),
        "alarm_description": alarm.get("AlarmDescription", ""),
        "alarm_name": alarm.get("AlarmName", ""),
        "arn": alarm.get("AlarmArn", ""),
        "comparison_operator": alarm.get("ComparisonOperator", ""),
        "datapoints_to_alarm": alarm.get("DatapointsToAlarm"),
        "dimensions": flatten_dimensions(alarm.get("Dimensions")),
        "evaluation_periods": alarm.get("EvaluationPeriods"),
        "insufficient_data_actions": flatten_string_set(alarm.get("InsufficientDataActions")),
        "metric_name": alarm.get("MetricName", ""),
        "metric_query": flatten_metric_queries(alarm.get("Metrics")),
        "namespace": alarm.get("Namespace", ""),
        "ok_actions": flatten_string_set(alarm.get("OKActions")),
        "period": alarm.get("Period"),
        "statistic": alarm.get("Statistic", ""),
        "threshold": _float_or_none(alarm.get("Threshold")),
        "unit": alarm.get("Unit", ""),
        "extended_statistic": alarm.get("ExtendedStatistic", ""),
        "treat_missing_data": alarm.get("TreatMissingData", ""),
        "evaluate_low_sample_count_percentiles": alarm.get(
            "EvaluateLowSampleCountPercentile", ""
        ),
    }
