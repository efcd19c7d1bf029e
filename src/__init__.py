"""Shared infrastructure for the stitch engine.

Architecture layers (strict one-way dependency):
    stitch_engine/scripts/ → stitch_engine/{records,pattern,commands,configs}/ → src/utils/

Key invariants:
    - Coordinates are opaque pattern units; nothing here rescales them
    - Pattern documents are YAML or JSON, validated before use
    - Library modules log through ``logging.getLogger(__name__)`` only
"""

__version__ = "0.3.0"
