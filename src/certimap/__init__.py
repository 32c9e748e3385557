"""Certimap: reconciles certified establishment listings from several sources."""
