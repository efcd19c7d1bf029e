"""
Stitch Engine Package.

In-memory embroidery pattern model and command-stream normalization.
Patterns arrive as validated ``pattern.v1`` documents, are rewritten by
pure stream-to-stream passes and are written back out as documents.

Subpackages:
    commands: Packed 32-bit command words (kinds, thread/needle/order fields)
    pattern: Pattern model, segmentation views and rewrite passes
    configs: Engine configuration loading and validation
    scripts: Batch normalization entry point
"""

__all__ = ["commands", "pattern", "configs", "records", "scripts"]
