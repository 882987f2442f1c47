"""
Ingestion — page fetching, chunking, embedding, and the pipeline that ties
them together.

This package holds the control logic that turns a list of web pages into
embedded chunk records in a vector collection.
"""
