"""
Utility modules for the BGG harvester.

Cross-cutting concerns:
- Source: Read the ranks CSV work queue
- Storage: File I/O helpers for batch output
- Stats: Run statistics tracking
"""
