"""Clinical Form Extraction System.

Classifies OCR text from scanned medical forms into known templates and
extracts patient identity, vitals, checkbox and free-text fields into a
stable, JSON-serialisable record.
"""
