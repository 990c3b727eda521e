"""
Export and replay of MySQL databases as portable SQL dump documents

Components:
- codec: rendering typed row values as MySQL literals
- replay: statement splitting, insert batching and transactional replay
- export: catalog queries and the dump document writer
- cli: the mysqldump-py command line

Usage:
    from mysqldump.config import ConnectionTarget, DumpConfig, SourceConfig
    from mysqldump.export import dump
    from mysqldump.replay import source
"""

__version__ = "1.0.0"
__all__ = ["codec", "replay", "export", "cli", "config", "errors"]
