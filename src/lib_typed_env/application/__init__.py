"""Application layer: key codec, discovery walker, assignment writer and ports."""
