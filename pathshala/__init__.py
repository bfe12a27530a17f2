"""
Pathshala - practice-content generation and progress analytics for a
children's learning app.
"""

__version__ = "1.0.0"
