"""
Rotation scoring: distribution fairness plus rest-period compliance.

Modules
-------
rotation_score : ReusePair dataclass + reuse_pairs() + compliance_counts()
                 + score() + score_band() — pure functions, no DB or I/O.
"""
