from typing import Dict, Optional

from .config import TICKET_TIERS, TierConfig


def price_for(tier: TierConfig, sold: int) -> Optional[int]:
    """Price of the next ticket when `sold` units are gone, None if sold out.

    A tier charges `low_price` while sold < low_threshold and `high_price`
    from there up to its capacity. Flat tiers have low_threshold == capacity.
    """
    if sold >= tier.capacity:
        return None
    if sold < tier.low_threshold:
        return tier.low_price
    return tier.high_price


def inventory(
    snapshot: Dict[str, int],
    tiers: Dict[str, TierConfig] = TICKET_TIERS,
) -> Dict[str, Dict[str, Optional[int]]]:
    out = {}
    for name, t in tiers.items():
        sold = int(snapshot.get(name, 0))
        out[name] = {
            "sold": sold,
            "capacity": t.capacity,
            "available": max(0, t.capacity - sold),
            "price": price_for(t, sold),
        }
    return out
