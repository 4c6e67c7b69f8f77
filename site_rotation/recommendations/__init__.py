"""
Recommendation engine: picks the next placement site from the classified
catalog.

Modules
-------
selector : RankedCandidate dataclass + rank_candidates() + recommend() —
           pure functions, no DB or I/O.
"""
