"""Route planning backend: model-generated city routes with geocoded points."""
