from datetime import date
from decimal import ROUND_DOWN, ROUND_HALF_UP, Decimal

CENTS = Decimal("0.01")


class LoyaltyError(ValueError):
    """Raised when a reward or coupon cannot be applied."""


def points_for(amount, plan):
    """Whole points earned for spending ``amount`` under ``plan``."""
    if plan is None or not amount:
        return 0
    earned = Decimal(amount) * (plan.points_per_currency or 0)
    return int(earned.to_integral_value(rounding=ROUND_DOWN))


def reward_progress(client, plan):
    threshold = plan.reward_threshold or 0
    points = client.loyalty_points or 0
    return {
        "clientId": client.id,
        "planId": plan.id,
        "points": points,
        "rewardThreshold": threshold,
        "pointsAway": max(0, threshold - points),
        "rewardAvailable": threshold > 0 and points >= threshold,
    }


def redeem_reward(client, plan):
    """Spend one reward's worth of points. Returns the points deducted."""
    if not plan.is_active:
        raise LoyaltyError("Loyalty plan is not active")
    threshold = plan.reward_threshold or 0
    if threshold <= 0:
        raise LoyaltyError("Loyalty plan has no reward threshold")
    if (client.loyalty_points or 0) < threshold:
        raise LoyaltyError("Not enough points for this reward")
    client.loyalty_points -= threshold
    return threshold


def coupon_discount(coupon, amount, today=None):
    """
    Discount ``coupon`` grants on a purchase of ``amount``.

    Percentage coupons are rounded to cents; the discount never exceeds the
    purchase itself.
    """
    today = today or date.today()
    amount = Decimal(amount)

    if not coupon.is_active:
        raise LoyaltyError("Coupon is not active")
    if coupon.valid_from and today < coupon.valid_from:
        raise LoyaltyError("Coupon is not valid yet")
    if coupon.valid_until and today > coupon.valid_until:
        raise LoyaltyError("Coupon has expired")
    if coupon.max_uses is not None and (coupon.used_count or 0) >= coupon.max_uses:
        raise LoyaltyError("Coupon usage limit reached")
    if coupon.min_purchase is not None and amount < coupon.min_purchase:
        raise LoyaltyError("Purchase is below the coupon minimum")

    if coupon.discount_type == "fixed":
        discount = Decimal(coupon.discount_value)
    else:
        discount = (amount * Decimal(coupon.discount_value) / 100).quantize(
            CENTS, rounding=ROUND_HALF_UP
        )
    return min(discount, amount)
