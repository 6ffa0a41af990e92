"""
Metric sources for CloudWatch metric alarms.

An alarm watches either a single metric (name, namespace, statistic...) or a
list of metric data queries. The two are modelled as a tagged variant: a
MetricSource is exactly one of SingleMetric or MetricQueries, and every
MetricQuery is in turn exactly one of an expression or a metric stat.
Construction from configuration rejects records with zero or several
populated cases.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from ..errors import ValidationError
from . import validators
from .types import ApiPayload

# Top-level alarm fields that only make sense for a single metric
SINGLE_METRIC_FIELDS = (
    "metric_name",
    "namespace",
    "period",
    "statistic",
    "extended_statistic",
    "dimensions",
)


def _is_set(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, (str, list, tuple, dict)):
        return len(value) > 0
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    return True


def expand_dimensions(dimensions: Optional[Mapping[str, Any]]) -> List[Dict[str, str]]:
    """Convert a dimension map into the API's Name/Value list, sorted by name."""
    return [
        {"Name": name, "Value": str(value)}
        for name, value in sorted((dimensions or {}).items())
    ]


@dataclass(frozen=True)
class SingleMetric:
    """An alarm on one named metric with exactly one statistic kind."""

    metric_name: str
    namespace: str = ""
    period: int = 0
    statistic: str = ""
    extended_statistic: str = ""
    dimensions: Tuple[Tuple[str, str], ...] = ()

    def to_api(self) -> ApiPayload:
        params: ApiPayload = {"MetricName": self.metric_name}
        if self.namespace:
            params["Namespace"] = self.namespace
        if self.period:
            params["Period"] = self.period
        if self.statistic:
            params["Statistic"] = self.statistic
        if self.extended_statistic:
            params["ExtendedStatistic"] = self.extended_statistic
        if self.dimensions:
            params["Dimensions"] = expand_dimensions(dict(self.dimensions))
        return params


@dataclass(frozen=True)
class MetricStat:
    """The raw metric half of a metric data query."""

    metric_name: str
    period: int
    stat: str
    namespace: str = ""
    unit: str = ""
    dimensions: Tuple[Tuple[str, str], ...] = ()

    def to_api(self) -> ApiPayload:
        metric: ApiPayload = {
            "MetricName": self.metric_name,
            "Dimensions": expand_dimensions(dict(self.dimensions)),
        }
        if self.namespace:
            metric["Namespace"] = self.namespace
        stat: ApiPayload = {"Metric": metric, "Period": self.period, "Stat": self.stat}
        if self.unit:
            stat["Unit"] = self.unit
        return stat


@dataclass(frozen=True)
class MetricQuery:
    """One metric data query: either a math expression or a metric stat."""

    id: str
    expression: str = ""
    metric: Optional[MetricStat] = None
    label: str = ""
    return_data: bool = False

    def to_api(self) -> ApiPayload:
        query: ApiPayload = {"Id": self.id, "ReturnData": self.return_data}
        if self.expression:
            query["Expression"] = self.expression
        if self.label:
            query["Label"] = self.label
        if self.metric is not None:
            query["MetricStat"] = self.metric.to_api()
        return query


@dataclass(frozen=True)
class MetricQueries:
    """An alarm on the result of metric data queries."""

    queries: Tuple[MetricQuery, ...] = field(default_factory=tuple)

    def to_api(self) -> ApiPayload:
        return {"Metrics": [query.to_api() for query in self.queries]}


MetricSource = Union[SingleMetric, MetricQueries]


def _dimension_items(value: Any) -> Tuple[Tuple[str, str], ...]:
    return tuple(sorted((str(k), str(v)) for k, v in (value or {}).items()))


def _metric_stat_from_config(alarm_name: str, query_id: str, raw: Any) -> MetricStat:
    blocks = raw if isinstance(raw, list) else [raw]
    if len(blocks) != 1 or not isinstance(blocks[0], dict):
        raise ValidationError(
            "validate metric alarm",
            alarm_name,
            f"metric_query {query_id!r} must contain exactly one metric block",
        )
    block = blocks[0]
    missing = [key for key in ("metric_name", "period", "stat") if not _is_set(block.get(key))]
    if missing:
        raise ValidationError(
            "validate metric alarm",
            alarm_name,
            f"metric_query {query_id!r} metric is missing {', '.join(missing)}",
        )
    validators.int_at_least(
        "validate metric alarm", alarm_name, f"metric_query.{query_id}.metric.period", block["period"], 1
    )
    return MetricStat(
        metric_name=block["metric_name"],
        period=int(block["period"]),
        stat=block["stat"],
        namespace=block.get("namespace") or "",
        unit=block.get("unit") or "",
        dimensions=_dimension_items(block.get("dimensions")),
    )


def _metric_query_from_config(alarm_name: str, raw: Mapping[str, Any]) -> MetricQuery:
    query_id = raw.get("id") or ""
    if not query_id:
        raise ValidationError(
            "validate metric alarm", alarm_name, "every metric_query requires an id"
        )
    expression = raw.get("expression") or ""
    metric_raw = raw.get("metric")
    has_metric = _is_set(metric_raw)
    if bool(expression) == has_metric:
        raise ValidationError(
            "validate metric alarm",
            alarm_name,
            f"metric_query {query_id!r} must set exactly one of `expression` or `metric`",
        )
    return MetricQuery(
        id=query_id,
        expression=expression,
        metric=_metric_stat_from_config(alarm_name, query_id, metric_raw) if has_metric else None,
        label=raw.get("label") or "",
        return_data=bool(raw.get("return_data", False)),
    )


def metric_source_from_config(alarm_name: str, config: Mapping[str, Any]) -> MetricSource:
    """
    Build the metric source variant of an alarm from its desired fields.

    Args:
        alarm_name: Alarm identity, used in error messages
        config: Desired alarm fields

    Returns:
        SingleMetric or MetricQueries

    Raises:
        ValidationError: If neither or both variants are populated, if a
            single-metric field is combined with metric_query, or if a single
            metric does not set exactly one of statistic / extended_statistic
    """
    queries_raw: Sequence[Mapping[str, Any]] = config.get("metric_query") or []
    has_queries = len(queries_raw) > 0
    has_metric_name = _is_set(config.get("metric_name"))

    if has_queries and has_metric_name:
        raise ValidationError(
            "validate metric alarm",
            alarm_name,
            "`metric_name` and `metric_query` cannot both be set",
        )
    if not has_queries and not has_metric_name:
        raise ValidationError(
            "validate metric alarm",
            alarm_name,
            "one of `metric_name` or `metric_query` must be set",
        )

    if has_queries:
        conflicting = [key for key in SINGLE_METRIC_FIELDS if _is_set(config.get(key))]
        if conflicting:
            raise ValidationError(
                "validate metric alarm",
                alarm_name,
                f"{', '.join(conflicting)} cannot be combined with `metric_query`",
            )
        queries = tuple(_metric_query_from_config(alarm_name, raw) for raw in queries_raw)
        ids = [query.id for query in queries]
        if len(set(ids)) != len(ids):
            raise ValidationError(
                "validate metric alarm", alarm_name, "metric_query ids must be unique"
            )
        return MetricQueries(queries)

    statistic = config.get("statistic") or ""
    extended_statistic = config.get("extended_statistic") or ""
    if bool(statistic) == bool(extended_statistic):
        raise ValidationError(
            "validate metric alarm",
            alarm_name,
            "One of `statistic` or `extended_statistic` must be set for a cloudwatch metric alarm",
        )
    return SingleMetric(
        metric_name=config["metric_name"],
        namespace=config.get("namespace") or "",
        period=int(config.get("period") or 0),
        statistic=statistic,
        extended_statistic=extended_statistic,
        dimensions=_dimension_items(config.get("dimensions")),
    )
