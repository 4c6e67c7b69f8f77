"""
Secondary analytics derived from placement history.

Modules
-------
streaks : current_streak() + longest_streak() — consecutive logged days.
heatmap : heatmap() — per-site usage count, intensity and share.
trends  : TrendGrouping + trend() + site_trends() — dense day/week series.
"""
