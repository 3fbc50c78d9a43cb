"""Append two or more preprocessed datasets and write the result as a cache directory.

Inputs may be cache directories (written by save_dataset), FieldTrip .mat files
or MNE -epo.fif files. The merge mode (concatenate trials or channels) is
inferred from the channel labels.

This writes:
  out/{trials.npz,time.npz,meta.json[,trl.npy]}
"""

import argparse
import json
import logging
import sys

from trialmerge.datamodules import AppendConfig, append_data
from trialmerge.datamodules.datasets import load_dataset, save_dataset
from trialmerge.datamodules.errors import AppendError


def main(argv=None) -> int:
    ap = argparse.ArgumentParser()
    ap.add_argument("inputs", nargs="+", help="datasets to append, in order; the first sets the channel order")
    ap.add_argument("--out", required=True, help="output cache directory")
    ap.add_argument("--variable", default=None, help="MATLAB variable holding the data (.mat inputs)")
    ap.add_argument("--quiet", action="store_true", help="only log warnings and errors")
    args = ap.parse_args(argv)

    logging.basicConfig(
        level=logging.WARNING if args.quiet else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        datasets = [load_dataset(p, variable=args.variable) for p in args.inputs]
        out = append_data(*datasets, cfg=AppendConfig(feedback=not args.quiet))
    except (AppendError, OSError, RuntimeError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    summary = out.provenance.to_dict()
    summary["inputs"] = list(args.inputs)
    save_dataset(args.out, out, extra_meta={"append": summary})
    print(json.dumps(summary, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
