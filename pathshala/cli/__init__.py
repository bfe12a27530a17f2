"""
CLI Module - Typer front end for the practice and progress engine.
"""
