"""
Profiler package — type dispatch and the per-variant profiling strategies.

Modules
-------
strategies
    One ``ProfilerStrategy`` per fingerprint variant: aggregator, display
    rendering, comparison vector.
dispatch
    Ranked ``(predicate, strategy)`` precedence, ``resolve_variant``,
    ``build_aggregator``, ``fingerprint`` and the renderers.
runner
    ``FingerprintRunner`` for fingerprinting many columns concurrently.
"""
