"""orbsentry quickstart: parse TLEs, screen now, forecast the next 24 hours."""

from orbsentry import (
    TrackedObject,
    forecast_conjunctions,
    format_probability,
    parse_tle,
    screen_now,
)

# Hardcoded element sets (ISS, Tiangong, Hubble)
tle_text = """
ISS (ZARYA)
1 25544U 98067A   24045.54896019  .00016717  00000-0  30093-3 0  9993
2 25544  51.6412 207.4925 0004948 290.5508 178.9792 15.49583488439596
CSS (TIANHE)
1 48274U 21035A   24045.50261574  .00021540  00000-0  25163-3 0  9993
2 48274  41.4681 279.1498 0005372 149.8847 345.3740 15.62096269157018
HST
1 20580U 90037B   24045.55478014  .00001456  00000-0  73052-4 0  9994
2 20580  28.4701  41.0696 0002622 348.3544 140.2428 15.09435694872912
""".strip()

objects = [TrackedObject.from_tle(tle) for tle in parse_tle(tle_text)]
for obj in objects:
    print(f"{obj.object_id:>6}  {obj.name:<14} {obj.regime.value}")

reference = objects[0].epoch

# Generous threshold so the demo shows something
current = screen_now(objects, threshold_km=5000.0, now=reference)
print(f"\nCurrent close approaches ({len(current)}):")
for risk in current:
    print(f"  {risk.primary_name} / {risk.secondary_name}: {risk.distance_km:.2f} km "
          f"[{risk.risk_level.value}] Pc={format_probability(risk.collision_probability_pct)}")

predicted = forecast_conjunctions(objects, threshold_km=500.0, now=reference)
print(f"\nPredicted conjunctions ({len(predicted)}):")
for risk in predicted:
    print(f"  {risk.tca:%Y-%m-%d %H:%M:%S} | {risk.primary_name} / {risk.secondary_name} | "
          f"{risk.distance_km:.2f} km | {risk.relative_velocity_km_s:.2f} km/s")
