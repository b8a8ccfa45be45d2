"""Service layer.

Modules:
- replicate: create predictions and poll their status on Replicate.
"""
