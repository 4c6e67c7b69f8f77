"""
Site catalog and readiness classification.

Modules
-------
catalog : build_catalog() + active_sites() + InvalidConfigurationError —
          resolves which sites the engine reasons about, in tie-break order.
status  : classify() + classify_catalog() + describe_status() — per-site
          Unused / Resting / Ready from calendar days since last use.
"""
