"""
main
====

Command line entry point running the complete ROI connectivity
analysis on one functional run:

1. **Load** the 4D functional image and the atlas resliced onto the
   same grid with :func:`roifc.volumes.load_inputs`.
2. **Resolve labels** from an explicit label file or the default
   Harvard-Oxford XML next to the atlas.
3. **Extract, standardize and correlate** ROI time series and
   **report** the highly correlated pairs with
   :class:`roifc.fc.FCAnalyzer`.
4. **Write** the series, matrix and pair table to ``--output``.

Example
-------
python -m roifc.main wEPI.nii HO_resliced.nii --k-std 1.5 --output results

"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional

from .config import AnalysisConfig
from .errors import RoiFCError, RunStatus
from .fc import FCAnalyzer, FCResult


logger = logging.getLogger(__name__)


def parse_args(args: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Extract ROI time series and report highly correlated ROI pairs")
    parser.add_argument('functional', type=str, help='4D functional image aligned to the atlas grid')
    parser.add_argument('atlas', type=str, help='3D label image resliced onto the functional grid')
    parser.add_argument('--labels', type=str, default=None,
                        help='Label file (FSL XML, TSV/CSV or text lookup table)')
    parser.add_argument('--base-path', type=str, default=None,
                        help='Project root containing "Harvard Oxford Atlas/"')
    parser.add_argument('--k-std', type=float, default=1.0,
                        help='Threshold in standard deviations above the mean FC')
    parser.add_argument('--output', type=str, default=None, help='Output directory')
    parser.add_argument('--prefix', type=str, default='', help='Output file name prefix')
    parser.add_argument('--unique-pairs', action='store_true',
                        help='Report each unordered pair once')
    parser.add_argument('--upper-triangle-stats', action='store_true',
                        help='Compute threshold statistics over the upper triangle only')
    parser.add_argument('--ddof', type=int, choices=(0, 1), default=1,
                        help='Standard deviation convention for z-scoring')
    parser.add_argument('--n-jobs', type=int, default=1, help='Threads used for ROI extraction')
    parser.add_argument('--no-save', action='store_true', help='Do not write any output file')
    parser.add_argument('--log-level', type=str, default='INFO',
                        choices=('DEBUG', 'INFO', 'WARNING', 'ERROR'))
    return parser.parse_args(args)


def config_from_args(args: argparse.Namespace) -> AnalysisConfig:
    return AnalysisConfig(
        k_std=args.k_std,
        ddof=args.ddof,
        n_jobs=args.n_jobs,
        unique_pairs=args.unique_pairs,
        upper_triangle_statistics=args.upper_triangle_stats,
        label_path=args.labels,
        base_path=args.base_path,
        save_dir=None if args.no_save else args.output,
        prefix=args.prefix,
    )


def print_summary(result: FCResult) -> None:
    stats = result.report.stats
    print(f"ROIs: {result.roi_ids.size}  timepoints: {result.raw.shape[0]}")
    print(f"Threshold: {stats.threshold:.4f} (mean {stats.mean:.4f} + {stats.k:g} * std {stats.std:.4f})")
    print(f"High-FC pairs: {len(result.report)}")
    table = result.report.to_dataframe()
    if not table.empty:
        print(table.to_string(index=False))
    for path in result.outputs.values():
        print(f"Written: {path}")
    if result.status is RunStatus.WARNINGS:
        print(f"Completed with {len(result.warnings)} warning(s):")
        for w in result.warnings:
            print(f"  {w}")


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s - %(levelname)s - %(message)s",
    )
    try:
        analyzer = FCAnalyzer(config_from_args(args))
        result = analyzer.run_files(args.functional, args.atlas)
    except RoiFCError as e:
        logger.error('Analysis failed (%s): %s', e.kind.value, e)
        print(f"error: {e}", file=sys.stderr)
        return 1
    print_summary(result)
    return 0


if __name__ == '__main__':
    sys.exit(main())
