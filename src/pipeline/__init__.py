"""Pipeline modules — orchestration layer for the postgraph build.

Each sub-module handles one stage:
  embeddings — posts -> cached embedding vectors (calls the provider)
  graph      — posts + embeddings -> graph-data.json and links-data.json
  search     — posts -> search-index.json
  build      — every stage in order

Stages read configuration from ``PostgraphConfig``, accept already-read
documents so one run parses the posts directory once, and record
per-item failures on an optional ``PipelineReport``.
"""
