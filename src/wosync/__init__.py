"""
wosync: keeps work orders consistent between an upstream system of record
and a local mirror database.

The synchronization engine performs read-modify-write status updates
against the upstream service, reassigns orders held by inactive field
workers, throttles batch updates, and asks the reconciliation pipeline
to refresh the mirror afterwards.
"""

__version__ = "0.1.0"
