"""Segmentation, classification and story assembly."""
