"""
Share text for charging records.

Fills a fixed template from a record and its trip metrics. The slogan is
the only random part and comes from an injectable chooser.
"""

import random
from typing import Callable, Optional, Sequence

from ev_charge_ledger.storage.models import ChargingRecord

DEFAULT_SITE_URL = "https://ev-charge-ledger.app"

DEFAULT_SLOGANS = (
    "Driving electric: every kilometre powered by clean energy! 🌱",
    "EV life saves money and shows a little love for the planet. 🌍",
    "Goodbye petrol stations, hello smart charging! ⚡️",
    "Saved on fuel again today and did something for the environment! 🔋",
    "Charging is not a burden, it is part of smart budgeting. 📊",
    "Quiet, cheap and clean: I am not going back to petrol. 🤫",
)

HASHTAGS = "#EVTracker #EVLife #CleanEnergy #SmartMobility"

DISTANCE_PLACEHOLDER = "not yet recorded"
COST_PER_KM_PLACEHOLDER = "calculating"

SHARE_TEMPLATE = """[My EV charging log ⚡️]
📍 Location: {location}
🔋 Energy: {kwh} kWh
💰 Total spent: {currency}{total}
🚗 Distance driven: {distance}
💎 Cost per km: {cost_per_km}

{slogan}

Want to keep track of your charging costs too? Try it here:
🔗 {site_url}

{hashtags}"""


def compose_share_text(
    record: ChargingRecord,
    trip_distance: Optional[float],
    cost_per_km: Optional[float],
    slogans: Sequence[str] = DEFAULT_SLOGANS,
    site_url: str = DEFAULT_SITE_URL,
    choose: Callable[[Sequence[str]], str] = random.choice,
    currency: str = "$"
) -> str:
    """Compose the text shared for a charging record.

    Args:
        record: Record being shared
        trip_distance: Distance since the previous reading; None or <= 0
            renders a placeholder
        cost_per_km: Cost per km for the trip; None or <= 0 renders a
            placeholder
        slogans: Candidate slogans, one is picked per call
        site_url: Link placed in the call to action
        choose: Picks one slogan; defaults to a uniform random choice
        currency: Symbol prefixed to money amounts

    Returns:
        Formatted share text

    Raises:
        ValueError: If slogans is empty
    """
    if not slogans:
        raise ValueError("slogans cannot be empty")

    if trip_distance is not None and trip_distance > 0:
        distance_text = f"{_format_number(trip_distance)} km"
    else:
        distance_text = DISTANCE_PLACEHOLDER

    if cost_per_km is not None and cost_per_km > 0:
        cost_text = f"{currency}{cost_per_km:.2f}/km"
    else:
        cost_text = COST_PER_KM_PLACEHOLDER

    return SHARE_TEMPLATE.format(
        location=record.location,
        kwh=_format_number(record.kwh),
        currency=currency,
        total=_format_number(record.total_amount),
        distance=distance_text,
        cost_per_km=cost_text,
        slogan=choose(slogans),
        site_url=site_url,
        hashtags=HASHTAGS
    )


def mask_email(email: Optional[str]) -> str:
    """Hide most of an email address for public feeds.

    "alice@example.com" becomes "a***e"; very short names keep what they
    have and get "***" appended.
    """
    if not email:
        return "EV driver"
    parts = email.split("@")
    if len(parts) < 2:
        return "anonymous driver"
    name = parts[0]
    if len(name) <= 2:
        return name + "***"
    return f"{name[0]}***{name[-1]}"


def _format_number(value: float) -> str:
    """Render to at most two decimals, without trailing zeros."""
    return f"{value:.2f}".rstrip("0").rstrip(".")
