#!/usr/bin/env python3
"""
photocollate - tile a cropped photo onto a print sheet

Usage: python collate.py compose photo.jpg --crop 10,20,300,500 --output sheet.jpg
"""

from photocollate.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
