"""Artifact persistence for manifests and chunks."""
