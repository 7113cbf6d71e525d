"""Query a block listing - which reconstructed files have missing blocks."""
from __future__ import annotations

import sys
from pathlib import Path

import duckdb


def main() -> None:
    if len(sys.argv) < 2:
        print("Usage: python query_blocks.py <blocks.parquet>")
        print("Example: mvis-report blocks --parquet blocks.parquet *.dat && python query_blocks.py blocks.parquet")
        sys.exit(1)

    listing = Path(sys.argv[1])

    con = duckdb.connect(":memory:")
    con.execute("CREATE VIEW blocks AS SELECT * FROM read_parquet(?)", [str(listing)])

    sql = """
    SELECT
        file,
        count(*) AS blocks,
        sum(missing_before) AS missing,
        count(*) FILTER (WHERE status = 'DUPLICATE') AS duplicates,
        count(DISTINCT archive) AS archives
    FROM blocks
    GROUP BY file
    HAVING sum(missing_before) > 0 OR count(*) FILTER (WHERE status <> 'OK') > 0
    ORDER BY missing DESC, file
    """

    print(f"--- Incomplete files: {listing} ---\n")

    df = con.execute(sql).fetchdf()
    if df.empty:
        print("All files complete.")
    else:
        for _, row in df.iterrows():
            print(f"FILE: {row['file']}")
            print(f"  Blocks: {row['blocks']} ({row['duplicates']} duplicated)")
            print(f"  Missing: {row['missing']}")
            print(f"  Archives: {row['archives']}")
            print()


if __name__ == "__main__":
    main()
