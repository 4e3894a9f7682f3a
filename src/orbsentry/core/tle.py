"""TLE (Two-Line Element) glue for the default SGP4 propagation adapter.

Parsing is delegated to the sgp4 library; this module only wraps the
resulting ``Satrec`` with the epoch and shell geometry the screening
engine needs.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from sgp4.api import Satrec, WGS72

from orbsentry.utils.constants import EARTH_MU_KM3_S2 as MU, EARTH_RADIUS_KM as RE

logger = logging.getLogger(__name__)


def _epoch_from_satrec(sat: Satrec) -> datetime:
    """Convert the satrec's two-digit year and fractional day to UTC."""
    year = sat.epochyr
    year = year + 2000 if year < 57 else year + 1900
    return datetime(year, 1, 1, tzinfo=timezone.utc) + timedelta(days=sat.epochdays - 1)


@dataclass(frozen=True)
class TLE:
    """A parsed Two-Line Element set.

    Attributes:
        name: Satellite name (line 0, if provided).
        line1: Raw TLE line 1.
        line2: Raw TLE line 2.
        norad_id: NORAD catalog number.
        epoch: Epoch as a UTC datetime.
        inclination_deg: Orbital inclination in degrees.
        raan_deg: Right ascension of ascending node in degrees.
        eccentricity: Orbital eccentricity (dimensionless).
        arg_perigee_deg: Argument of perigee in degrees.
        mean_anomaly_deg: Mean anomaly in degrees.
        mean_motion_rev_per_day: Mean motion in revolutions per day.
        bstar: BSTAR drag term.
        satrec: Underlying sgp4 Satrec object for propagation.
    """

    name: str
    line1: str
    line2: str
    norad_id: int
    epoch: datetime
    inclination_deg: float
    raan_deg: float
    eccentricity: float
    arg_perigee_deg: float
    mean_anomaly_deg: float
    mean_motion_rev_per_day: float
    bstar: float
    satrec: Satrec = field(repr=False, compare=False)

    @classmethod
    def from_lines(cls, line1: str, line2: str, name: str = "") -> TLE:
        """Parse a TLE from its two data lines.

        Args:
            line1: TLE line 1 (69 characters).
            line2: TLE line 2 (69 characters).
            name: Optional satellite name (line 0).

        Returns:
            A parsed TLE object.

        Raises:
            ValueError: If the TLE lines are malformed.
        """
        line1 = line1.strip()
        line2 = line2.strip()

        if len(line1) != 69 or not line1.startswith("1"):
            raise ValueError(f"Invalid TLE line 1: {line1!r}")
        if len(line2) != 69 or not line2.startswith("2"):
            raise ValueError(f"Invalid TLE line 2: {line2!r}")
        if line1[2:7] != line2[2:7]:
            raise ValueError(
                f"TLE catalog numbers differ: {line1[2:7]!r} vs {line2[2:7]!r}"
            )

        sat = Satrec.twoline2rv(line1, line2, WGS72)

        return cls(
            name=name.strip(),
            line1=line1,
            line2=line2,
            norad_id=sat.satnum,
            epoch=_epoch_from_satrec(sat),
            inclination_deg=math.degrees(sat.inclo),
            raan_deg=math.degrees(sat.nodeo),
            eccentricity=sat.ecco,
            arg_perigee_deg=math.degrees(sat.argpo),
            mean_anomaly_deg=math.degrees(sat.mo),
            mean_motion_rev_per_day=sat.no_kozai * 1440 / (2 * math.pi),
            bstar=sat.bstar,
            satrec=sat,
        )

    @property
    def period_minutes(self) -> float:
        return 1440.0 / self.mean_motion_rev_per_day

    @property
    def semi_major_axis_km(self) -> float:
        n_rad_per_sec = self.mean_motion_rev_per_day * 2 * math.pi / 86400.0
        return (MU / (n_rad_per_sec ** 2)) ** (1.0 / 3.0)

    @property
    def perigee_altitude_km(self) -> float:
        return self.semi_major_axis_km * (1 - self.eccentricity) - RE

    @property
    def apogee_altitude_km(self) -> float:
        return self.semi_major_axis_km * (1 + self.eccentricity) - RE

    def __str__(self) -> str:
        header = f"{self.name}\n" if self.name else ""
        return f"{header}{self.line1}\n{self.line2}"


def parse_tle(text: str) -> list[TLE]:
    """Parse one or more TLEs from text.

    Handles both 2-line and 3-line (with name) formats. Lines that do not
    belong to a recognizable set are skipped.

    Args:
        text: Raw TLE text, one or more TLE sets separated by newlines.

    Returns:
        A list of parsed TLE objects.
    """
    lines = [l.rstrip() for l in text.strip().splitlines() if l.strip()]
    tles: list[TLE] = []
    name = ""
    pending = ""

    for line in lines:
        if line.startswith("1 "):
            pending = line
        elif line.startswith("2 ") and pending:
            tles.append(TLE.from_lines(pending, line, name=name))
            pending, name = "", ""
        elif line.startswith("2 "):
            pending, name = "", ""  # orphan line 2
        else:
            pending = ""
            name = line[2:] if line.startswith("0 ") else line

    logger.debug("Parsed %d TLEs from text", len(tles))
    return tles
