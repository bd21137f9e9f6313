"""Rendering and publishing of the file_sd target group document."""
