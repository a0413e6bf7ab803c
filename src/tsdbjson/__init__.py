"""Decode time-series database storage objects into JSON."""
