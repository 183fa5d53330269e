"""
Core — Data model and filesystem primitives

Contains:
- finding: Finding, Report, skip tracking
- walker: Bounded-depth traversal, sizing, safe reads
- fingerprint: Probabilistic duplicate grouping
"""
