"""
photocollate - Photo print sheet layout

Tiles copies of one cropped photo onto a print sheet in a centered grid,
turning the sheet when that fits more copies.
"""

__version__ = "1.0.0"
