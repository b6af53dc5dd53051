"""
Declarative advice tables for anomalies and forecasts.

Rules are matched against substrings of the metric name, evaluated in
declaration order, and every matching rule contributes its advice.
"""

import re
from collections.abc import Iterable
from dataclasses import dataclass


@dataclass(frozen=True)
class RecommendationRule:
    """Advice attached to metrics whose name contains any of the keywords"""

    keywords: tuple[str, ...]
    on_spike: tuple[str, ...]
    on_drop: tuple[str, ...]

    def matches(self, metric: str) -> bool:
        return any(keyword in metric for keyword in self.keywords)

    def advice(self, is_spike: bool) -> tuple[str, ...]:
        return self.on_spike if is_spike else self.on_drop


RECOMMENDATION_RULES: tuple[RecommendationRule, ...] = (
    RecommendationRule(
        keywords=("response", "latency"),
        on_spike=(
            "Check for database connection issues",
            "Review recent code changes for performance regressions",
            "Monitor server resource utilization",
        ),
        on_drop=(
            "Verify monitoring accuracy",
            "Check for caching improvements",
        ),
    ),
    RecommendationRule(
        keywords=("error",),
        on_spike=(
            "Review application logs for error patterns",
            "Check external service dependencies",
            "Implement circuit breakers if needed",
        ),
        on_drop=(
            "Review application logs for error patterns",
            "Check external service dependencies",
            "Implement circuit breakers if needed",
        ),
    ),
    RecommendationRule(
        keywords=("throughput", "request"),
        on_spike=(
            "Monitor for potential DDoS attacks",
            "Check auto-scaling configuration",
        ),
        on_drop=(
            "Investigate accessibility issues",
            "Review load balancer configuration",
        ),
    ),
)

# Window trend above this on a 'performance' metric is called out
POSITIVE_TREND_THRESHOLD = 0.5
POSITIVE_TREND_KEYWORDS = ("performance",)
POSITIVE_TREND_ADVICE = "Positive trend detected - monitor for sustainability"

ACCELERATING_TREND_ADVICE = (
    "Monitor resource consumption",
    "Plan capacity adjustments",
    "Review recent changes for optimization opportunities",
)
DECELERATING_TREND_ADVICE = (
    "Investigate performance improvements",
    "Document effective optimization strategies",
    "Consider applying similar improvements to other areas",
)

# Risk factors attached to forecasts
VOLATILITY_THRESHOLD = 0.3
VOLATILITY_RISK = "High metric volatility"
DECLINE_SLOPE_THRESHOLD = -1.0
DECLINE_KEYWORDS = ("performance", "score")
DECLINE_RISK = "Declining performance trend"
RECENT_ANOMALY_LIMIT = 2
RECENT_ANOMALY_RISK = "Recent anomaly frequency"

RELATED_SUFFIX = re.compile(r"_(response|error|throughput|latency|time)$")
MAX_RELATED_METRICS = 5


def recommendations_for(metric: str, is_spike: bool, trend: float = 0.0) -> list[str]:
    """Collect advice for a spike or drop on the given metric"""
    recommendations = []

    if trend > POSITIVE_TREND_THRESHOLD and any(k in metric for k in POSITIVE_TREND_KEYWORDS):
        recommendations.append(POSITIVE_TREND_ADVICE)

    for rule in RECOMMENDATION_RULES:
        if rule.matches(metric):
            recommendations.extend(rule.advice(is_spike))

    return recommendations


def trend_recommendations(trend_change: float) -> list[str]:
    """Advice for an accelerating (positive) or decelerating trend change"""
    if trend_change > 0:
        return list(ACCELERATING_TREND_ADVICE)
    return list(DECELERATING_TREND_ADVICE)


def risk_factors_for(
    metric: str, volatility: float, slope: float, recent_anomalies: int
) -> list[str]:
    """Risk factors for a forecast

    Args:
        metric: Metric name
        volatility: Coefficient of variation over the full series
        slope: Fitted slope of the forecast
        recent_anomalies: Anomalies for this metric in the last hour
    """
    risks = []
    if volatility > VOLATILITY_THRESHOLD:
        risks.append(VOLATILITY_RISK)
    if slope < DECLINE_SLOPE_THRESHOLD and any(k in metric for k in DECLINE_KEYWORDS):
        risks.append(DECLINE_RISK)
    if recent_anomalies > RECENT_ANOMALY_LIMIT:
        risks.append(RECENT_ANOMALY_RISK)
    return risks


def base_name(metric: str) -> str:
    """Strip a trailing measurement suffix, e.g. 'api_latency' -> 'api'"""
    return RELATED_SUFFIX.sub("", metric)


def related_metrics(metric: str, tracked: Iterable[str]) -> list[str]:
    """Other tracked metrics whose name contains the metric's base name"""
    base = base_name(metric)
    related = [other for other in tracked if other != metric and base in other]
    return related[:MAX_RELATED_METRICS]
