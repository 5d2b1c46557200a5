# fare_tracker/tracking/alert_evaluator.py

"""Deal threshold evaluation."""

from fare_tracker.models.alert import (
    AlertDecision,
    AlertReason,
    AlertThresholds,
)


class AlertEvaluator:
    """Decides whether the current lowest fares qualify as a deal.

    Stateless: the same inputs always give the same decision, so a deal
    that keeps holding fires again on every cycle.
    """

    @staticmethod
    def evaluate(
        lowest_outbound: int,
        lowest_inbound: int,
        passenger_count: int | None,
        thresholds: AlertThresholds,
    ) -> AlertDecision:
        """Check the total threshold first, then the per-passenger one."""
        total = lowest_outbound + lowest_inbound
        per_passenger = total / max(passenger_count or 1, 1)

        if thresholds.total is not None and total <= thresholds.total:
            return AlertDecision(
                fired=True,
                reason=AlertReason.TOTAL,
                total=total,
                per_passenger=per_passenger,
            )
        if (
            thresholds.individual is not None
            and per_passenger <= thresholds.individual
        ):
            return AlertDecision(
                fired=True,
                reason=AlertReason.INDIVIDUAL,
                total=total,
                per_passenger=per_passenger,
            )
        return AlertDecision(
            fired=False,
            reason=AlertReason.NONE,
            total=total,
            per_passenger=per_passenger,
        )
