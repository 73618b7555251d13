# Guards package init
"""
Quillpost Backend — Guards Package
====================================

Per-route policy checks, run in this order by quillpost.pipeline.run_gates:
    authentication.py → roles.py → features.py

Each guard either returns (request may continue) or raises a
PipelineRejection subclass (request ends with that error).
"""
