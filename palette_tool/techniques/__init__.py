"""palette-tool techniques.

Every module here that defines a module-level `technique` object is picked
up by palette_tool.registry.discover() and becomes a CLI subcommand.
"""
