"""
Test suite for the ImageDisk reader.

This package contains:
- Unit tests for the sector, track and header decoders and the image model
- Integration tests for complete decodes, raw export and the command line
- Builders for synthetic IMD images
"""
