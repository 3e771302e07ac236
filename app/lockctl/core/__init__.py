"""Reconciliation engine for lockctl.

Scanner, aggregator, policy engine and closure executor, plus the
configuration, path and reporting helpers they share.
"""
