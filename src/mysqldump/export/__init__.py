"""
Dump export.

Components:
- catalog: catalog queries and the per-run trigger cache
- writer: the dump document writer and the dump operation
"""

from .catalog import Catalog, TriggerCache, TriggerDefinition
from .writer import DumpWriter, dump

__all__ = ["Catalog", "TriggerCache", "TriggerDefinition", "DumpWriter", "dump"]
