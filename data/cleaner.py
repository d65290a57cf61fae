"""
Normalisation of reservoir register tables.

Real exports from county water offices contain:
- "1,200,000" or "1 200 000" instead of 1200000
- "—", "n/a", "-" instead of empty values
- Empty rows and totals at the bottom
- Inconsistent headers ("Sub-County", "Level (%)", "Capacity m3")
"""

import re
from typing import Optional
import pandas as pd
import logging

logger = logging.getLogger(__name__)


class ParseError(Exception):
    """Reservoir register could not be read or lacks required columns"""
    pass


# === Column synonyms ===
# Key is our standard name, values are normalised headers seen in files
COLUMN_SYNONYMS = {
    'id': ['id', 'reservoir id', 'no', 'no.'],
    'name': ['name', 'reservoir', 'reservoir name', 'dam', 'dam name'],
    'ward': ['ward'],
    'sub_county': ['sub county', 'subcounty'],
    'county': ['county'],
    'current_level_percentage': [
        'current level percentage', 'current level %', 'level %', 'level percentage',
        'level pct', 'percentage', 'capacity %',
    ],
    'current_level_m3': ['current level m3', 'current level', 'current volume', 'volume m3', 'volume'],
    'total_capacity_m3': ['total capacity m3', 'total capacity', 'capacity m3', 'capacity'],
    'status': ['status'],
    'last_updated': ['last updated', 'updated', 'updated at', 'last update', 'date'],
}

REQUIRED_COLUMNS = ['name', 'county']
NUMERIC_COLUMNS = ['current_level_percentage', 'current_level_m3', 'total_capacity_m3']
TEXT_COLUMNS = ['name', 'ward', 'sub_county', 'county', 'status']

# "Empty" cell patterns
EMPTY_PATTERNS = ['-', '—', '–', 'n/a', 'na', 'none', 'nil', '']


def normalize_column_name(name) -> Optional[str]:
    """
    Maps a header onto our schema.

    Examples:
    - "Sub-County" -> "sub_county"
    - "Level (%)" -> "current_level_percentage"
    - "Capacity m3" -> "total_capacity_m3"
    - "Notes" -> None
    """
    key = str(name).lower().strip()
    key = re.sub(r'[()\[\]]', '', key)
    key = re.sub(r'[_\-]+', ' ', key)
    key = re.sub(r'\s+', ' ', key).strip()

    for standard_name, synonyms in COLUMN_SYNONYMS.items():
        if key == standard_name.replace('_', ' ') or key in synonyms:
            return standard_name

    return None


def clean_number(value) -> Optional[float]:
    """
    Cleans a numeric cell.

    Examples:
    - "1,200,000" -> 1200000.0
    - "1 200 000" -> 1200000.0
    - "35.5%" -> 35.5
    - "—" -> None
    """
    if value is None:
        return None

    if isinstance(value, (int, float)):
        if pd.isna(value):
            return None
        return float(value) if value >= 0 else None

    s = str(value).strip().lower()

    if s in EMPTY_PATTERNS:
        return None

    s = re.sub(r'[\s%,]', '', s)
    s = re.sub(r'(m3|m³)$', '', s)

    try:
        result = float(s)
        return result if result >= 0 else None
    except ValueError:
        logger.debug(f"Not a number: {value!r}")
        return None


def _clean_text(value) -> Optional[str]:
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return None
    s = str(value).strip()
    return None if s.lower() in EMPTY_PATTERNS else s


def clean_reservoir_frame(
    df: pd.DataFrame,
    critical_threshold: float = 40.0
) -> tuple[pd.DataFrame, list[str]]:
    """
    Normalises a raw reservoir table.

    Steps:
    1. Drop fully empty rows
    2. Map headers onto the standard schema
    3. Clean text and numeric cells
    4. Drop rows without a reservoir name (totals, notes)
    5. Derive the level percentage from volumes where missing
    6. Fill status and ids

    Args:
        df: register table from read_register()
        critical_threshold: level % below which a reservoir is CRITICAL

    Returns:
        tuple[DataFrame, list[str]]: cleaned DataFrame and warnings

    Raises:
        ParseError: a required column is missing
    """
    warnings = []

    # 1. Empty rows
    original_rows = len(df)
    df = df.dropna(how='all')
    dropped_empty = original_rows - len(df)
    if dropped_empty > 0:
        warnings.append(f"Dropped {dropped_empty} empty rows")

    # 2. Headers
    column_mapping = {}
    unmapped_columns = []

    for col in df.columns:
        normalized = normalize_column_name(col)
        if normalized and normalized not in column_mapping.values():
            column_mapping[col] = normalized
        else:
            unmapped_columns.append(str(col))

    if unmapped_columns:
        warnings.append(f"Unrecognised columns: {', '.join(unmapped_columns)}")
        logger.debug(f"Unrecognised columns: {unmapped_columns}")

    df = df.rename(columns=column_mapping)[list(column_mapping.values())].copy()

    missing = [col for col in REQUIRED_COLUMNS if col not in df.columns]
    if missing:
        raise ParseError(f"Missing required columns: {', '.join(missing)}")

    # 3. Cell values
    for col in TEXT_COLUMNS:
        if col in df.columns:
            df[col] = df[col].apply(_clean_text)
        else:
            df[col] = None

    for col in NUMERIC_COLUMNS:
        if col in df.columns:
            df[col] = df[col].apply(clean_number)
        else:
            df[col] = None

    # 4. Rows without a name
    original_rows = len(df)
    df = df[df['name'].notna() & df['county'].notna()].copy()
    dropped_unnamed = original_rows - len(df)
    if dropped_unnamed > 0:
        warnings.append(f"Dropped {dropped_unnamed} rows without a reservoir name or county")

    # 5. Level percentage
    derivable = (
        df['current_level_percentage'].isna()
        & df['current_level_m3'].notna()
        & df['total_capacity_m3'].notna()
        & (df['total_capacity_m3'].fillna(0) > 0)
    )
    if derivable.any():
        df.loc[derivable, 'current_level_percentage'] = (
            df.loc[derivable, 'current_level_m3'] / df.loc[derivable, 'total_capacity_m3'] * 100
        )
        warnings.append(f"Derived level percentage from volumes for {int(derivable.sum())} rows")

    original_rows = len(df)
    df = df[df['current_level_percentage'].notna()].copy()
    dropped_no_level = original_rows - len(df)
    if dropped_no_level > 0:
        warnings.append(f"Dropped {dropped_no_level} rows without a water level")

    df['current_level_m3'] = df['current_level_m3'].fillna(0.0).astype(float)
    df['total_capacity_m3'] = df['total_capacity_m3'].fillna(0.0).astype(float)
    df['current_level_percentage'] = df['current_level_percentage'].astype(float)

    # 6. Status, timestamps and ids
    default_status = df['current_level_percentage'].apply(
        lambda pct: "CRITICAL" if pct < critical_threshold else "NORMAL"
    )
    df['status'] = df['status'].where(df['status'].notna(), default_status)

    if 'last_updated' in df.columns:
        df['last_updated'] = pd.to_datetime(df['last_updated'], errors='coerce', format='mixed')
    else:
        df['last_updated'] = pd.NaT

    if 'id' in df.columns:
        df['id'] = df['id'].apply(clean_number)
        original_rows = len(df)
        df = df[df['id'].notna()].copy()
        if len(df) < original_rows:
            warnings.append(f"Dropped {original_rows - len(df)} rows without a valid id")
        df['id'] = df['id'].astype(int)
    else:
        df['id'] = range(1, len(df) + 1)

    df = df.reset_index(drop=True)

    logger.info(f"Reservoir table cleaned: {len(df)} rows, {len(warnings)} warnings")

    return df, warnings
