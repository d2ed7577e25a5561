"""
Canvas Image Editor - crop, rotate, resize and annotate raster images.

This package contains the main application modules:
- editor: Editing engine (model, history, crop frame, annotations, controller)
- services: Application services (config, logging)
"""

__version__ = "0.1.0"
