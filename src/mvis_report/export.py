from __future__ import annotations

from pathlib import Path

import pandas as pd
import pyarrow as pa
import pyarrow.parquet as pq

BLOCKS_SCHEMA = pa.schema(
    [
        ("archive", pa.string()),
        ("file", pa.string()),
        ("counter", pa.int32()),
        ("missing_before", pa.int32()),
        ("status", pa.string()),
    ]
)


def export_blocks(rows: list[dict], out_path: Path) -> bool:
    """Write the per-frame block listing as Parquet. Returns False when empty."""
    df = pd.DataFrame(rows)
    if df.empty:
        return False

    Path(out_path).parent.mkdir(parents=True, exist_ok=True)
    table = pa.Table.from_pandas(df, schema=BLOCKS_SCHEMA, preserve_index=False)
    pq.write_table(table, out_path)
    return True
