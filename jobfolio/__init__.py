"""
JOBFOLIO - Job application tracking with versioned resume documents

Keeps job applications next to the resume and cover-letter versions sent with
them, and protects both with differential, dual-partition backups.

Architecture:
- Storage Context: Persisted key-value store and partition-scoped keys
- Tracking Context: Job applications and their links to document versions
- Documents Context: CV versions, reusable resume sections, compositions
- Backup Context: Snapshots, change detection, retention, restore and export
"""

__version__ = "0.1.0"
