"""Generate synthetic MVIS archives for demos and tests.

Each session writes a few logical files split across several raw archives,
with idle frames sprinkled in. Optional faults: dropped blocks, duplicated
blocks and an earlier retransmission of every archive.
"""
import argparse
import json
import random
from datetime import datetime, timezone
from pathlib import Path

from mvis_core.archive import write_archive
from mvis_core.frames import encode_data_frame, encode_idle_frame, encode_new_file_frame
from mvis_core.protocol import COUNTER_MASK, PAYLOAD_LEN

# --- CONFIGURATION ---
FILES_PER_SESSION = 3
FRAMES_PER_ARCHIVE = 40
IDLE_RATIO = 0.1


def build_frames(rng, files, drop=(), duplicate=()):
    """Frame stream for ``files`` (name -> content) with faults applied.

    ``drop`` and ``duplicate`` hold (file index, block index) pairs.
    """
    frames = []
    for fi, (name, content) in enumerate(files.items()):
        frames.append(encode_new_file_frame(name, len(content)))
        for bi in range(0, (len(content) + PAYLOAD_LEN - 1) // PAYLOAD_LEN):
            if rng.random() < IDLE_RATIO:
                frames.append(encode_idle_frame())
            if (fi, bi) in drop:
                continue
            chunk = content[bi * PAYLOAD_LEN:(bi + 1) * PAYLOAD_LEN]
            frame = encode_data_frame(bi & COUNTER_MASK, chunk)
            frames.append(frame)
            if (fi, bi) in duplicate:
                frames.append(frame)
    return frames


def generate_session(out_dir, upi="00042", seed=0, gaps=False, retransmit=False):
    rng = random.Random(seed)
    out = Path(out_dir)

    files = {}
    for i in range(FILES_PER_SESSION):
        lines = [f"{upi} line {n:04d} value={rng.randint(0, 9999):04d}" for n in range(rng.randint(20, 60))]
        files[f"mvis_{upi}_{i}.lst"] = ("\n".join(lines) + "\n").encode()

    drop = {(1, 3), (1, 4)} if gaps else set()
    duplicate = {(0, 2)} if gaps else set()
    frames = build_frames(rng, files, drop, duplicate)

    archives = []
    for part, start in enumerate(range(0, len(frames), FRAMES_PER_ARCHIVE)):
        chunk = frames[start:start + FRAMES_PER_ARCHIVE]
        stem = f"hdk51{upi}-{part:03d}"
        if retransmit:
            # Earlier transmission of the same window, truncated and superseded
            write_archive(out / f"{stem}_001.dat", chunk[: len(chunk) // 2])
        archives.append(write_archive(out / f"{stem}_002.dat", chunk))

    expected = {name: content.hex() for name, content in files.items()}
    (out / "expected.json").write_text(json.dumps({
        "upi": upi,
        "created": datetime.now(timezone.utc).isoformat(),
        "archives": [str(a) for a in archives],
        "missing": len(drop),
        "files": expected,
    }, indent=2))
    print(f"Generated {len(archives)} archives for UPI {upi} in {out}")
    return archives


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("out_dir")
    parser.add_argument("--upi", default="00042")
    parser.add_argument("--seed", type=int, default=0)
    parser.add_argument("--gaps", action="store_true", help="drop and duplicate some blocks")
    parser.add_argument("--retransmit", action="store_true", help="write superseded retransmissions too")
    args = parser.parse_args()
    generate_session(args.out_dir, upi=args.upi, seed=args.seed, gaps=args.gaps, retransmit=args.retransmit)
