"""orbsentry monitoring: re-screen a catalog on a schedule until interrupted."""

import logging
import sys
import threading

from orbsentry import ConjunctionMonitor, Scheduler, TrackedObject, parse_tle

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")

if len(sys.argv) != 2:
    sys.exit("usage: monitoring.py CATALOG.tle")

with open(sys.argv[1]) as fh:
    catalog = [TrackedObject.from_tle(tle) for tle in parse_tle(fh.read())]

monitor = ConjunctionMonitor(lambda: catalog, Scheduler(), forecast_workers=4)
monitor.start()

stop = threading.Event()
try:
    monitor.scheduler.run(stop)
except KeyboardInterrupt:
    stop.set()
finally:
    monitor.stop()

for risk in monitor.forecast[:10]:
    print(f"{risk.risk_id}: {risk.distance_km:.2f} km at {risk.tca:%H:%M:%S} [{risk.risk_level.value}]")
