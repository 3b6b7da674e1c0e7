"""
CLI layer - Typer commands for operators and the booking desk.
"""
