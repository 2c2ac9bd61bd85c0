"""Upstream collaborators: the metadata API and the HTTP plumbing around it."""
