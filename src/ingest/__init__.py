"""Workload trace ingestion.

This package reads raw, gzip, and zip workload traces line by line.
It turns valid trace records into task descriptors for simulators.
"""
