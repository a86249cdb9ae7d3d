"""Cybersecurity compliance self-assessment: scoring, gap analysis and reports
for NIST CSF v2.0, CMMC and the NIST Privacy Framework."""

__version__ = "2.0.0"
