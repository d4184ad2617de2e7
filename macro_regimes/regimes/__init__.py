"""
Rate / inflation regime classification.

Regime types:
  rate_direction_regime  fixed band on the 12m change in the policy rate
  rate_level_regime      25th / 75th percentile of the policy rate
  inflation_regime       25th / 75th percentile of CPI YoY
  joint_regime           "<inflation> + <direction>"

Usage:
    from macro_regimes.regimes.signals import build_regime_table
    result = build_regime_table(panel)
    result.tagged, result.counts
"""
