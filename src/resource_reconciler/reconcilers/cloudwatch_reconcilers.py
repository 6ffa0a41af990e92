"""
CloudWatch Reconcilers Module.

This module reconciles aws_cloudwatch_metric_alarm resources. PutMetricAlarm
is a full replace, so an update resends every field together; it is only
issued when at least one declared field changed.
"""

from typing import Any, Callable, List, Optional

from ...errors import ValidationError
from ...utils import remote_operation, setup_logging
from .. import validators
from ..comparators.base import ComparisonResult
from ..comparators.cloudwatch_comparators import ALARM_DECLARED_FIELDS, comparator_for
from ..flatteners.cloudwatch_flatteners import flatten_metric_alarm
from ..metric_sources import MetricSource, metric_source_from_config
from ..resource_data import ResourceData
from ..types import ApiPayload, CloudWatchClient
from .base import ResourceReconciler

logger = setup_logging()

TREAT_MISSING_DATA_VALUES = ("breaching", "notBreaching", "ignore", "missing")
LOW_SAMPLE_COUNT_PERCENTILE_VALUES = ("evaluate", "ignore")
OPERATION = "validate metric alarm"


@remote_operation("put metric alarm")
def put_metric_alarm(conn: CloudWatchClient, alarm_name: str, params: ApiPayload) -> None:
    conn.put_metric_alarm(**params)


@remote_operation("describe alarms")
def find_metric_alarm(conn: CloudWatchClient, alarm_name: str) -> Optional[ApiPayload]:
    """
    Look up a metric alarm by exact name.

    DescribeAlarms may return alarms whose names only partially match, so the
    response is filtered on equality.
    """
    response = conn.describe_alarms(AlarmNames=[alarm_name])
    for alarm in response.get("MetricAlarms", []):
        if alarm.get("AlarmName") == alarm_name:
            return alarm
    return None


@remote_operation("delete alarms")
def delete_metric_alarm(conn: CloudWatchClient, alarm_name: str) -> None:
    conn.delete_alarms(AlarmNames=[alarm_name])


def _string_set(values: Any) -> List[str]:
    return sorted(set(values or []))


def build_put_metric_alarm_input(data: ResourceData, source: MetricSource) -> ApiPayload:
    """
    Build PutMetricAlarm parameters from the desired fields.

    Optional fields are only included when set, so that omitting a field
    never overwrites a remote default with an empty value.
    """
    params: ApiPayload = {
        "AlarmName": data.get("alarm_name"),
        "ComparisonOperator": data.get("comparison_operator"),
        "EvaluationPeriods": int(data.get("evaluation_periods")),
        "Threshold": float(data.get("threshold")),
        "TreatMissingData": data.get("treat_missing_data"),
        "ActionsEnabled": bool(data.get("actions_enabled")),
    }

    value, ok = data.get_ok("alarm_description")
    if ok:
        params["AlarmDescription"] = value
    value, ok = data.get_ok("datapoints_to_alarm")
    if ok:
        params["DatapointsToAlarm"] = int(value)
    value, ok = data.get_ok("unit")
    if ok:
        params["Unit"] = value
    value, ok = data.get_ok("evaluate_low_sample_count_percentiles")
    if ok:
        params["EvaluateLowSampleCountPercentile"] = value

    for field_name, api_key in (
        ("alarm_actions", "AlarmActions"),
        ("insufficient_data_actions", "InsufficientDataActions"),
        ("ok_actions", "OKActions"),
    ):
        actions = _string_set(data.get(field_name))
        if actions:
            params[api_key] = actions

    params.update(source.to_api())
    return params


class CloudWatchMetricAlarmReconciler(ResourceReconciler):
    """Reconciler for aws_cloudwatch_metric_alarm."""

    resource_type = "aws_cloudwatch_metric_alarm"
    service = "cloudwatch"
    identity_field = "alarm_name"
    defaults = {"actions_enabled": True, "treat_missing_data": "missing"}
    computed = ("evaluate_low_sample_count_percentiles",)
    declared_fields = ALARM_DECLARED_FIELDS

    def comparator_for(self, field_name: str) -> Callable[[str, Any, Any], ComparisonResult]:
        return comparator_for(field_name)

    def validate(self, data: ResourceData, identity: str) -> None:
        if not identity:
            raise ValidationError(OPERATION, identity, "`alarm_name` is required")
        for name in ("comparison_operator", "evaluation_periods", "threshold"):
            if data.get(name) in (None, ""):
                raise ValidationError(OPERATION, identity, f"`{name}` is required")

        validators.number(OPERATION, identity, "threshold", data.get("threshold"))
        validators.int_at_least(OPERATION, identity, "evaluation_periods", data.get("evaluation_periods"), 1)
        validators.int_at_least(OPERATION, identity, "period", data.get("period"), 1)
        validators.int_at_least(OPERATION, identity, "datapoints_to_alarm", data.get("datapoints_to_alarm"), 1)
        validators.string_in_slice(
            OPERATION,
            identity,
            "treat_missing_data",
            data.get("treat_missing_data"),
            TREAT_MISSING_DATA_VALUES,
            ignore_case=True,
        )
        validators.string_in_slice(
            OPERATION,
            identity,
            "evaluate_low_sample_count_percentiles",
            data.config.get("evaluate_low_sample_count_percentiles"),
            LOW_SAMPLE_COUNT_PERCENTILE_VALUES,
            ignore_case=True,
        )
        validators.arns(OPERATION, identity, "alarm_actions", data.get("alarm_actions") or [])

        metric_source_from_config(identity, data.config)

    def _put(self, data: ResourceData) -> None:
        source = metric_source_from_config(data.get("alarm_name"), data.config)
        params = build_put_metric_alarm_input(data, source)
        logger.debug(f"Putting CloudWatch Metric Alarm: {params}")
        put_metric_alarm(self.conn, params["AlarmName"], params)

    def _create(self, data: ResourceData) -> None:
        self._put(data)
        data.set_id(str(data.get("alarm_name")))

    def _read(self, data: ResourceData) -> bool:
        alarm = find_metric_alarm(self.conn, data.id)
        if alarm is None:
            return False
        logger.debug(f"Reading CloudWatch Metric Alarm: {data.id}")
        data.state = flatten_metric_alarm(alarm)
        return True

    def _update(self, data: ResourceData) -> bool:
        differences = self.diff(data)
        if not differences:
            return False
        logger.debug(
            f"CloudWatch Metric Alarm {data.id} changed attributes: "
            f"{[item['attribute'] for item in differences]}"
        )
        self._put(data)
        return True

    def _delete(self, data: ResourceData) -> None:
        delete_metric_alarm(self.conn, data.id)
