"""
app/parsing package marker.
"""

from app.parsing.tabular_decoder import TabularDecoder

__all__ = ["TabularDecoder"]
