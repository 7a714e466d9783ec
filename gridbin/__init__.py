"""
gridbin

Anonymous file hosting backed by MongoDB GridFS. Uploads get a short public
identifier for viewing/downloading and a separate secret token for deletion.
"""

__version__ = "1.0.0"
