"""
Achievement progress and awarding.

Modules
-------
evaluator : achievement_progress() + evaluate_all() — pure progress (0–1).
awards    : award_new_achievements() — persists types that just completed.
"""
