"""
Text table and message bank exporter/importer for Etrian Odyssey.

Exports .tbl and .mbm files to JSON for translation, and imports the edited
JSON back into those formats.
"""

from exim.cli import run


if __name__ == "__main__":
    run()
