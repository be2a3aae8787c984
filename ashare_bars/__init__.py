"""
A-share Trading Session Calendar and Bar Resampling

Holiday-aware trading-day arithmetic for the Shanghai/Shenzhen equity market,
plus OHLCV bar series that can be windowed and downsampled to coarser periods.
"""

__version__ = "0.1.0"
