"""ATM catalog loading."""

import logging
from pathlib import Path
from typing import Tuple

import pandas as pd

from .models import POI
from .utils import is_valid_coordinate

logger = logging.getLogger(__name__)

CATALOG_COLUMNS = ["id", "name", "lat", "lon"]


def load_catalog(csv_file) -> Tuple[POI, ...]:
    """
    Load ATMs from a CSV file with an ``id,name,lat,lon`` header.

    Rows with missing fields, unparseable or out-of-range coordinates are
    skipped. When an id repeats, the first row wins.

    Args:
        csv_file: Path to catalog CSV

    Returns:
        Tuple of POIs in file order

    Raises:
        FileNotFoundError: If the CSV file does not exist
        ValueError: If required columns are missing
    """
    csv_path = Path(csv_file)
    if not csv_path.exists():
        raise FileNotFoundError(f"Catalog file not found: {csv_file}")

    df = pd.read_csv(csv_path, dtype=str, keep_default_na=False,
                     skipinitialspace=True, on_bad_lines="skip")
    df.columns = [str(c).strip().lower() for c in df.columns]

    missing = [c for c in CATALOG_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"Catalog {csv_file} is missing columns: {', '.join(missing)}")

    df = df[CATALOG_COLUMNS].copy()
    for col in CATALOG_COLUMNS:
        df[col] = df[col].astype(str).str.strip()
    lat = pd.to_numeric(df["lat"], errors="coerce")
    lon = pd.to_numeric(df["lon"], errors="coerce")

    pois = []
    seen = set()
    skipped = 0
    for idx, row in df.iterrows():
        poi_id, name = row["id"], row["name"]
        if not poi_id or not name or not is_valid_coordinate(lat[idx], lon[idx]):
            skipped += 1
            logger.debug("Skipping malformed catalog row %s: %s", idx, row.to_dict())
            continue
        if poi_id in seen:
            skipped += 1
            logger.debug("Skipping duplicate ATM id %s", poi_id)
            continue

        seen.add(poi_id)
        pois.append(POI(id=poi_id, name=name, lat=float(lat[idx]), lon=float(lon[idx])))

    logger.info("Loaded %d ATMs from %s (%d rows skipped)", len(pois), csv_path, skipped)
    return tuple(pois)
