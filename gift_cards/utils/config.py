import dataclasses
import os


def parse_tolerance(value: str) -> int:
    try:
        tolerance = int(value)
    except ValueError:
        raise ValueError(
            f"GIFT_CARDS_REDEEM_BURN_TOLERANCE must be an integer, got {value!r}"
        ) from None
    if tolerance < 0:
        raise ValueError(
            f"GIFT_CARDS_REDEEM_BURN_TOLERANCE must not be negative, got {tolerance}"
        )
    return tolerance


# Allowance of input tokens above the consumed gift card balance when redeeming and burning in one go.
# This is a policy choice, not derived from anything on chain.
REDEEM_BURN_TOLERANCE = parse_tolerance(
    os.getenv("GIFT_CARDS_REDEEM_BURN_TOLERANCE", "1000")
)


@dataclasses.dataclass(frozen=True)
class GiftCardsConfig:
    redeem_burn_tolerance: int = REDEEM_BURN_TOLERANCE


DEFAULT_CONFIG = GiftCardsConfig()
