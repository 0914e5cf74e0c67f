"""Background workers"""
from .consistency_auditor import ConsistencyAuditorWorker

__all__ = ["ConsistencyAuditorWorker"]
