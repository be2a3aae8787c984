"""
Example runner script demonstrating programmatic resampling.

This calls the same run_resample() function used by the CLI.
"""

import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from ashare_bars.config import load_config
from ashare_bars.data import TradingDay
from ashare_bars.run.runner import run_resample


def main():
    """Run example resample"""
    config_path = Path(__file__).parent.parent / "configs" / "weekly.yaml"

    if not config_path.exists():
        print(f"ERROR: Config file not found: {config_path}")
        print("Please create a config file first or update the path.")
        return 1

    try:
        config = load_config(str(config_path))

        # Optionally override programmatically
        # config.resample.symbol = "000001"
        # config.resample.end = "2023-07-07"

        print(f"Latest session: {TradingDay.latest()}")
        print(f"Resampling with config: {config_path}")
        result = run_resample(config)

        print("\n" + "=" * 70)
        print("RESAMPLE COMPLETE")
        print("=" * 70)
        print(f"Symbol: {result.symbol}")
        print(f"End Session: {result.end}")
        print(f"Bars: {len(result.chart)} x {result.chart.period}")
        print("-" * 70)
        for bar in result.chart.bars[-5:]:
            print(f"{bar.date}  O {bar.open:8.2f}  C {bar.close:8.2f}  chg {bar.markup():+6.2f}%  amp {bar.amplitude():5.2f}%")
        print("=" * 70)
        print(f"Elapsed: {result.elapsed_s:.3f}s")

        return 0

    except Exception as e:
        print(f"ERROR: {e}")
        import traceback
        traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
