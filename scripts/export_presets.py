from __future__ import annotations

import argparse
import json
from pathlib import Path

from badgekit.engine.presets import list_presets, preset


def main() -> None:
    parser = argparse.ArgumentParser(description="Write each built-in preset to its own JSON file")
    parser.add_argument("--out", dest="out_dir", type=str, default="out/presets", help="Output directory")
    parser.add_argument("--kind", dest="kind", type=str, default=None, help="Only presets of this kind")
    args = parser.parse_args()

    out_dir = Path(args.out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    written = 0
    for key in list_presets():
        template = preset(key)
        if args.kind and template.kind != args.kind:
            continue
        # Round-trip through Template so exported files carry normalised field names.
        path = out_dir / f"{key}.json"
        path.write_text(json.dumps(template.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8")
        written += 1

    print(f"Wrote {written} preset(s) to {out_dir}")


if __name__ == "__main__":
    main()
