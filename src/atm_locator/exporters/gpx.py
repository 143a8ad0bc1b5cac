"""GPX exporter for ATM lookup results."""

import gpxpy.gpx
from pathlib import Path
from datetime import datetime
from typing import List

from ..core.models import ScoredCandidate

ATM_SYMBOL = "Bank"


class GPXExporter:
    """Export ranked ATMs as GPX waypoints."""

    def __init__(self, symbol: str = ATM_SYMBOL):
        """
        Initialize GPX Exporter.

        Args:
            symbol: Waypoint symbol written for every ATM
        """
        self.symbol = symbol

    def build_gpx(self, candidates: List[ScoredCandidate],
                  title: str = "Nearest ATMs") -> gpxpy.gpx.GPX:
        """
        Build a GPX document with one waypoint per result, in rank order.

        Args:
            candidates: Ranked ATMs
            title: GPX document name

        Returns:
            GPX object
        """
        gpx = gpxpy.gpx.GPX()
        gpx.name = title
        gpx.description = f"ATM lookup - Generated {datetime.now().strftime('%Y-%m-%d')}"

        for rank, candidate in enumerate(candidates, start=1):
            wpt = gpxpy.gpx.GPXWaypoint(
                latitude=candidate.lat,
                longitude=candidate.lon,
                name=f"#{rank} {candidate.name}",
            )
            wpt.symbol = self.symbol
            wpt.type = "atm"

            desc_parts = [f"ID: {candidate.id}"]
            if candidate.distance is not None:
                kind = "road" if candidate.refined else "straight line"
                desc_parts.append(f"Distance: {candidate.distance:.2f} km ({kind})")
            if candidate.duration is not None:
                desc_parts.append(f"Duration: {candidate.duration / 60:.0f} min")
            if candidate.score is not None:
                desc_parts.append(f"Match score: {candidate.score:.2f}")
            desc_parts.append(candidate.poi.map_url)
            wpt.description = " | ".join(desc_parts)

            gpx.waypoints.append(wpt)

        return gpx

    def export_gpx(self, candidates: List[ScoredCandidate], output_file: str,
                   title: str = "Nearest ATMs") -> str:
        """
        Write ranked ATMs to a GPX file.

        Args:
            candidates: Ranked ATMs
            output_file: Output GPX file path
            title: GPX document name

        Returns:
            Path to output file
        """
        gpx = self.build_gpx(candidates, title=title)

        output_path = Path(output_file)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with open(output_file, "w", encoding="utf-8") as f:
            f.write(gpx.to_xml())

        return str(output_file)
