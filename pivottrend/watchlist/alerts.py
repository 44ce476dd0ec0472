"""Price alert evaluation — pure functions, no I/O."""


def alert_fires(alert: dict, price: float) -> bool:
    """Whether *price* satisfies the alert's level and direction.

    ``above`` fires at or over the level, ``below`` at or under it.
    """
    if alert["direction"] == "above":
        return price >= alert["price_level"]
    return price <= alert["price_level"]


def evaluate_alerts(alerts: list[dict], prices: dict[str, float]) -> list[dict]:
    """Return the untriggered alerts whose ticker price crosses their level.

    Alerts for tickers missing from *prices* are skipped.
    """
    fired: list[dict] = []
    for alert in alerts:
        if alert.get("triggered"):
            continue
        price = prices.get(alert["ticker"])
        if price is None:
            continue
        if alert_fires(alert, price):
            fired.append(alert)
    return fired
