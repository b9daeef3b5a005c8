"""palette_tool.core — Foundation layer.

Contains colour conversion and metrics, the extraction pipeline stages,
type definitions, configuration and the report builder.
This module has NO dependencies on palette_tool.techniques or palette_tool.registry.
Only stdlib, numpy, PIL and loguru are allowed here.
"""
