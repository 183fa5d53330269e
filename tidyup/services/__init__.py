"""
Services — Scanning, external tools and remediation

Contains:
- git: Read-only git queries
- scanner: Runs detectors, builds Reports
- agent_logs: Parses external cleanup-agent logs
- remediation: Executable fixes
- remediator: Interactive / unattended fix flow
"""
