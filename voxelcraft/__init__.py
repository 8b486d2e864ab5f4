"""Procedural voxel world generation and editing"""
