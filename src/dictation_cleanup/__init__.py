"""Dictation Cleanup - post-processing for speech-to-text transcripts.

Turns raw recognizer output into finished text:
1. Correction: built-in contextual rules and a user-trained dictionary
2. Sentence case
3. Number normalization ("two hundred and five" -> "205")
"""

__version__ = "0.1.0"
