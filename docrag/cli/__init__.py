"""Command-line tools for docrag.

- ``python -m docrag.cli extract FILE`` -- run the extraction cascade and
  print text plus metadata.
- ``python -m docrag.cli chunk FILE`` -- extract and print the chunks.
- ``python -m docrag.cli ask FILE... --question Q`` -- ingest and answer.
"""
